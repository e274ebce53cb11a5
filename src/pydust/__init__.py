"""pydust - Async Python client for the DUST tree monitoring API."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pydust")
except PackageNotFoundError:
    __version__ = "0+local"
from pydust.client import DustClient
from pydust.config import DustConfig
from pydust.exceptions import (
    DustApiError,
    DustConfigError,
    DustError,
    DustTransportError,
    GeolocationError,
    GeolocationPermissionDeniedError,
    GeolocationPositionUnavailableError,
    GeolocationTimeoutError,
    GeolocationUnavailableError,
)
from pydust.geo import nearest_tree, planar_distance
from pydust.geolocation import GeolocationProvider, IpGeolocationProvider, StaticGeolocationProvider
from pydust.models import Location, PageMeta, Tree, TreePage
from pydust.state import (
    ClosestTreeResolver,
    LocationStore,
    TreeCollectionState,
    TreeStore,
    UserLocationState,
    closest_tree,
)

__all__ = [
    "__version__",
    "ClosestTreeResolver",
    "DustApiError",
    "DustClient",
    "DustConfig",
    "DustConfigError",
    "DustError",
    "DustTransportError",
    "GeolocationError",
    "GeolocationPermissionDeniedError",
    "GeolocationPositionUnavailableError",
    "GeolocationProvider",
    "GeolocationTimeoutError",
    "GeolocationUnavailableError",
    "IpGeolocationProvider",
    "Location",
    "LocationStore",
    "PageMeta",
    "StaticGeolocationProvider",
    "Tree",
    "TreeCollectionState",
    "TreePage",
    "TreeStore",
    "UserLocationState",
    "closest_tree",
    "nearest_tree",
    "planar_distance",
]
