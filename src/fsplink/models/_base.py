"""Base model for FSP simulator messages.

Every inbound message model inherits from :class:`FspBaseModel` which
provides:

* frozen instances, so a decoded message can be shared between the
  broadcaster and log handlers without copying.
* ``extra="ignore"`` so newer simulator builds can add fields freely.
* A ``raw`` dict that captures the original payload.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator


class FspBaseModel(BaseModel):
    """Base for FSP wire models."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
    )

    raw: dict[str, Any] = Field(default_factory=dict, exclude=True)
    """Original payload dict."""

    @model_validator(mode="before")
    @classmethod
    def _stash_raw(cls, values: Any) -> Any:
        """Stash the raw payload unless the caller provided one."""
        if not isinstance(values, dict):
            return values
        if "raw" in values:
            return values
        return {**values, "raw": dict(values)}
