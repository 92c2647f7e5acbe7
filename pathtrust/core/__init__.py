"""Digest engine, codecs, streaming hashing, and path identity."""
