"""Base model and enums shared by mtxwatch models.

Every model inherits from :class:`MtxBaseModel` which provides:

* ``alias_generator=to_camel`` so camelCase relay keys map
  automatically to snake_case fields, and ``model_dump(by_alias=True)``
  produces the camelCase shape UI consumers expect.
* Frozen instances, so snapshots handed out by the store cannot be
  mutated behind its back.
"""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class MtxBaseModel(BaseModel):
    """Base for mtxwatch models."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
    )


class CameraStatus(StrEnum):
    CHECKING = "checking"
    ONLINE = "online"
    OFFLINE = "offline"
    ERROR = "error"


class CameraQuality(StrEnum):
    HD = "HD"
    FHD = "FHD"
    UHD_4K = "4K"
