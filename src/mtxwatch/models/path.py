"""Relay path models.

Fields are mapped from the MediaMTX ``/v3/paths/list`` and
``/v3/config/paths/get/{name}`` responses.
"""

from __future__ import annotations

from typing import Any

from pydantic import Field, model_validator

from mtxwatch._constants import UNKNOWN_SOURCE
from mtxwatch.models._base import MtxBaseModel


class PathListItem(MtxBaseModel):
    """One entry of the ``items`` array returned by ``/paths/list``."""

    name: str
    ready: bool | None = None
    source: dict[str, Any] | None = None
    """Runtime source descriptor (``{"type": ..., "id": ...}``), not the URL."""


class PathConfig(MtxBaseModel):
    """Configuration of a single relay path.

    A synthetic ``PathConfig`` with ``error=True`` stands in for a path
    whose configuration could not be fetched.
    """

    name: str
    source: str = UNKNOWN_SOURCE
    error: bool = False
    raw: dict[str, Any] = Field(default_factory=dict)
    """Original relay payload."""

    @model_validator(mode="before")
    @classmethod
    def _stash_raw(cls, values: Any) -> Any:
        if not isinstance(values, dict):
            return values
        cleaned = dict(values)
        if not cleaned.get("source"):
            cleaned.pop("source", None)
        if "raw" not in values:
            cleaned["raw"] = dict(values)
        return cleaned

    @classmethod
    def unavailable(cls, name: str) -> PathConfig:
        """Placeholder for a path whose configuration fetch failed."""
        return cls(name=name, source=UNKNOWN_SOURCE, error=True, raw={})
