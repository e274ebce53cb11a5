"""Tree (monitoring station) models.

Trees are taken from the server as sent: an odd entry never causes the
rest of a page to be rejected. Unusable fields fall back to their
defaults, and a tree whose position cannot be read keeps
``location=None`` and is skipped by distance computations.
"""

from __future__ import annotations

from typing import Any

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    ValidatorFunctionWrapHandler,
    field_validator,
)

from pydust.models._base import DustBaseModel
from pydust.models.location import Location


def _as_text(value: Any) -> str:
    if isinstance(value, str):
        return value
    # The server uses numeric ids on some deployments.
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return ""


class Tree(DustBaseModel):
    """A monitored tree with a fixed geographic position.

    Identity is :attr:`id`; two trees are the same tree when their ids
    match, regardless of the other fields.
    """

    id: str = ""
    name: str = ""
    description: str = ""
    location: Location | None = None
    image_url: str = ""
    detail_url: str = Field(default="", validation_alias=AliasChoices("detail_url", "tree_url"))

    @field_validator("id", "name", "description", "image_url", "detail_url", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> str:
        return _as_text(value)

    @field_validator("location", mode="wrap")
    @classmethod
    def _tolerate_location(cls, value: Any, handler: ValidatorFunctionWrapHandler) -> Location | None:
        try:
            return handler(value)
        except ValidationError:
            return None

    @property
    def has_location(self) -> bool:
        return self.location is not None


class PageMeta(BaseModel):
    """Pagination block sent next to ``data``."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    current_page: int | None = None
    last_page: int | None = None
    per_page: int | None = None
    total: int | None = None


class TreePage(DustBaseModel):
    """One page of the trees resource.

    Only ``data`` is required; ``meta`` and ``links`` are kept when the
    server sends them. Non-object entries in ``data`` become empty trees
    carrying the original value in ``raw["value"]``.
    """

    data: list[Tree]
    meta: PageMeta | None = None
    links: Any = None

    @field_validator("data", mode="before")
    @classmethod
    def _wrap_non_objects(cls, value: Any) -> Any:
        if not isinstance(value, list):
            return value
        return [item if isinstance(item, dict) else {"raw": {"value": item}} for item in value]

    @field_validator("meta", mode="wrap")
    @classmethod
    def _tolerate_meta(cls, value: Any, handler: ValidatorFunctionWrapHandler) -> PageMeta | None:
        try:
            return handler(value)
        except ValidationError:
            return None

    @property
    def has_more(self) -> bool:
        """Whether the server reports pages after this one."""
        if self.meta is None or self.meta.current_page is None or self.meta.last_page is None:
            return False
        return self.meta.current_page < self.meta.last_page
