"""Metadata of a valid store path."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from pathtrust.core.digest import Digest
from pathtrust.models.content_address import ContentAddress
from pathtrust.models.store_path import StorePath


class PathInfo(BaseModel):
    """Identity plus metadata of one object in the store.

    ``references`` may contain ``path`` itself.  ``nar_size`` of 0 means the
    size is unknown.  Everything except ``sigs`` is treated as fixed once
    the info has been built; signatures accumulate through ``sign``.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True, validate_assignment=True)

    path: StorePath
    nar_hash: Digest
    nar_size: int = Field(default=0, ge=0)
    deriver: StorePath | None = None
    references: set[StorePath] = Field(default_factory=set)
    registration_time: int = 0
    ultimate: bool = False
    sigs: set[str] = Field(default_factory=set)
    ca: ContentAddress | None = None
