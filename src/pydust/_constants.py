"""Internal constants shared across the library."""

BASE_URL = "https://dust.devbitapp.be/api"
TREES_RESOURCE = "trees"
USER_AGENT = "pydust/0.1"

# Placeholder location used until the first successful geolocation fix.
DEFAULT_LATITUDE = 51.0
DEFAULT_LONGITUDE = 3.0

GEOLOCATION_URL = "https://ipapi.co/json/"
