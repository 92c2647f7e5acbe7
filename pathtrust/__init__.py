"""pathtrust: digests, fingerprints, and signatures for content-addressed stores.

  - Digest values for md5 / sha1 / sha256 / sha512 with base16, base32,
    base64 and SRI text forms
  - Streaming hashing with mid-stream checkpoints
  - Canonical path fingerprints, Ed25519 detached signatures (PyNaCl)
  - Content-address derivation with self-reference handling
"""

__version__ = "0.1.0"
__description__ = "Trust and identity layer for content-addressed storage"

from pathtrust.core.digest import (
    BadDigest,
    Digest,
    HashAlgorithm,
    HashFormat,
    UsageError,
    compress_digest,
    parse_digest,
)
from pathtrust.core.hasher import HashSink, hash_bytes, hash_file, hash_path

__all__ = [
    "BadDigest",
    "Digest",
    "HashAlgorithm",
    "HashFormat",
    "HashSink",
    "UsageError",
    "compress_digest",
    "hash_bytes",
    "hash_file",
    "hash_path",
    "parse_digest",
    "__version__",
]
