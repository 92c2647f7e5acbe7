"""Pydantic models for store identities, content addresses, and path info."""

from pathtrust.models.content_address import (
    ContentAddress,
    ContentAddressError,
    ContentAddressMethod,
    ContentAddressWithReferences,
    FixedOutputInfo,
    StoreReferences,
    TextInfo,
)
from pathtrust.models.path_info import PathInfo
from pathtrust.models.store_path import BadStorePath, StorePath

__all__ = [
    "BadStorePath",
    "ContentAddress",
    "ContentAddressError",
    "ContentAddressMethod",
    "ContentAddressWithReferences",
    "FixedOutputInfo",
    "PathInfo",
    "StorePath",
    "StoreReferences",
    "TextInfo",
]
