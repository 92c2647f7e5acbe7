"""Content-address descriptors and their reference-carrying variants.

``ContentAddress`` is what gets persisted next to a path: the ingestion
method and the content digest.  ``TextInfo`` and ``FixedOutputInfo`` add
the reference set needed to recompute the store path.  For fixed-output
objects a self reference is carried as the ``self_reference`` flag of
``StoreReferences`` rather than as a literal path, because the path is
not known until it has been computed.
"""

from __future__ import annotations

from enum import Enum
from pydantic import BaseModel, ConfigDict, Field, field_validator

from pathtrust.core.digest import BadDigest, Digest, HashFormat, parse_hash_algorithm, parse_non_sri_unprefixed
from pathtrust.models.store_path import StorePath


class ContentAddressError(ValueError):
    """Raised for malformed or contradictory content-address data."""


class ContentAddressMethod(str, Enum):
    """How an object's bytes were turned into its content digest.

    * ``text`` — flat hash of the bytes of a single text file.
    * ``flat`` — fixed output, flat hash of a single regular file.
    * ``recursive`` — fixed output, hash of the archive serialisation.
    """

    TEXT = "text"
    FLAT = "flat"
    RECURSIVE = "recursive"

    @property
    def is_fixed_output(self) -> bool:
        return self is not ContentAddressMethod.TEXT

    @property
    def ingestion_prefix(self) -> str:
        """``r:`` for recursive ingestion, empty otherwise."""
        return "r:" if self is ContentAddressMethod.RECURSIVE else ""

    def __str__(self) -> str:
        return self.value


class ContentAddress(BaseModel):
    """Persisted ``{method, hash}`` descriptor of a content-addressed path."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    method: ContentAddressMethod
    hash: Digest

    def render(self) -> str:
        """``text:<algo>:<base32>`` or ``fixed:[r:]<algo>:<base32>``."""
        digest = self.hash.to_string(HashFormat.BASE32, True)
        if self.method is ContentAddressMethod.TEXT:
            return f"text:{digest}"
        return f"fixed:{self.method.ingestion_prefix}{digest}"

    @classmethod
    def parse(cls, text: str) -> ContentAddress:
        """Inverse of ``render``."""
        prefix, sep, rest = text.partition(":")
        if not sep:
            raise ContentAddressError(f"content address '{text}' has no prefix")
        if prefix == "text":
            method = ContentAddressMethod.TEXT
        elif prefix == "fixed":
            method = ContentAddressMethod.FLAT
            if rest.startswith("r:"):
                method = ContentAddressMethod.RECURSIVE
                rest = rest[2:]
        else:
            raise ContentAddressError(
                f"content address '{text}' has unknown prefix '{prefix}', expect 'text' or 'fixed'"
            )
        algo, sep, payload = rest.partition(":")
        if not sep:
            raise BadDigest(f"content address '{text}' hash does not include a type", text)
        return cls(method=method, hash=parse_non_sri_unprefixed(payload, parse_hash_algorithm(algo)))

    def __str__(self) -> str:
        return self.render()


class StoreReferences(BaseModel):
    """References of a fixed-output path, with the self reference split out."""

    model_config = ConfigDict(frozen=True)

    others: frozenset[StorePath] = Field(default_factory=frozenset)
    self_reference: bool = False

    def is_empty(self) -> bool:
        return not self.self_reference and not self.others

    def __len__(self) -> int:
        return len(self.others) + (1 if self.self_reference else 0)


class TextInfo(BaseModel):
    """Text-ingested content address.  Text objects never refer to themselves."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    hash: Digest
    references: frozenset[StorePath] = Field(default_factory=frozenset)

    @property
    def method(self) -> ContentAddressMethod:
        return ContentAddressMethod.TEXT


class FixedOutputInfo(BaseModel):
    """Fixed-output (flat or recursive) content address with its references."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    method: ContentAddressMethod
    hash: Digest
    references: StoreReferences = Field(default_factory=StoreReferences)

    @field_validator("method")
    @classmethod
    def _check_method(cls, v: ContentAddressMethod) -> ContentAddressMethod:
        if not ContentAddressMethod(v).is_fixed_output:
            raise ContentAddressError("fixed-output content address cannot use text ingestion")
        return v


ContentAddressWithReferences = TextInfo | FixedOutputInfo
