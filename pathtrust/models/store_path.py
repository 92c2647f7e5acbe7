"""Store path identity: a base-32 hash part plus a human-readable name."""

from __future__ import annotations

import re

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from pathtrust.core.codec import BASE32_CHARS

HASH_PART_LEN = 32
MAX_NAME_LEN = 211

_NAME_RE = re.compile(r"^[A-Za-z0-9+\-._?=]+$")


class BadStorePath(ValueError):
    """Raised when a store path or store path name is malformed."""


def check_name(name: str) -> str:
    """Validate a store path name and return it unchanged."""
    if not name:
        raise BadStorePath("store path name is empty")
    if len(name) > MAX_NAME_LEN:
        raise BadStorePath(f"store path name '{name}' is longer than {MAX_NAME_LEN} characters")
    if name.startswith("."):
        raise BadStorePath(f"store path name '{name}' starts with a period")
    if not _NAME_RE.match(name):
        raise BadStorePath(f"store path name '{name}' contains illegal characters")
    return name


class StorePath(BaseModel):
    """The store-relative identity of an object, e.g. ``<hash>-hello-2.12``.

    Instances are frozen and hashable, so they can live in reference sets.
    Ordering follows the base name, which is also the order of the printed
    absolute paths within one store directory.

    Examples
    --------
    >>> p = StorePath.parse("g1w7hy3qg1w7hy3qg1w7hy3qg1w7hy3q-foo")
    >>> p.name
    'foo'
    """

    model_config = ConfigDict(frozen=True)

    hash_part: str
    name: str

    @field_validator("hash_part")
    @classmethod
    def _check_hash_part(cls, v: str) -> str:
        if len(v) != HASH_PART_LEN or any(c not in BASE32_CHARS for c in v):
            raise BadStorePath(f"invalid store path hash part '{v}'")
        return v

    @field_validator("name")
    @classmethod
    def _check_name(cls, v: str) -> str:
        return check_name(v)

    @classmethod
    def parse(cls, base_name: str) -> StorePath:
        """Parse ``<hash part>-<name>``."""
        if len(base_name) < HASH_PART_LEN + 2 or base_name[HASH_PART_LEN] != "-":
            raise BadStorePath(f"'{base_name}' is not a valid store path base name")
        try:
            return cls(
                hash_part=base_name[:HASH_PART_LEN],
                name=base_name[HASH_PART_LEN + 1 :],
            )
        except ValidationError as exc:
            raise BadStorePath(f"'{base_name}' is not a valid store path: {exc.errors()[0]['msg']}") from exc

    def __str__(self) -> str:
        return f"{self.hash_part}-{self.name}"

    def __lt__(self, other: StorePath) -> bool:
        if not isinstance(other, StorePath):
            return NotImplemented
        return str(self) < str(other)
