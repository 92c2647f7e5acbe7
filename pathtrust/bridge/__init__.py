"""Bridge layer between pathtrust and the signing infrastructure.

Modules
-------
crypto_bridge
    Ed25519 detached signatures over fingerprints, via PyNaCl (libsodium).
    Keys and signatures travel as ``<key name>:<base64>`` text.
"""
