"""Base model for DUST API payloads.

Every DUST response model inherits from :class:`DustBaseModel` which
provides:

* Frozen instances, so a received payload can never be mutated in place.
* A ``model_validator(mode="before")`` that drops ``null`` values so the
  field default is used instead.
* A ``raw`` dict that captures the original payload.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator


class DustBaseModel(BaseModel):
    """Base for DUST API response models."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
    )

    raw: dict[str, Any] = Field(default_factory=dict, repr=False)
    """Original API response dict."""

    @model_validator(mode="before")
    @classmethod
    def _drop_nulls(cls, values: Any) -> Any:
        """Drop ``None`` values and stash the raw payload."""
        if not isinstance(values, dict):
            return values
        cleaned = {key: value for key, value in values.items() if value is not None}
        # Keep an explicitly supplied raw= (kwargs construction).
        if "raw" not in values:
            cleaned["raw"] = dict(values)
        return cleaned
