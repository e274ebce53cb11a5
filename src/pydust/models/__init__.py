"""Data models for DUST API responses."""

from pydust.models._base import DustBaseModel
from pydust.models.location import Location
from pydust.models.tree import PageMeta, Tree, TreePage

__all__ = [
    "DustBaseModel",
    "Location",
    "PageMeta",
    "Tree",
    "TreePage",
]
