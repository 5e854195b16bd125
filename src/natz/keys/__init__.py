"""
Keypair Provider

Class-tagged Ed25519 keypairs. The secret-backed key store lives in
``natz.keys.keystore``.
"""

from .nkeys import (
    KeyClass,
    KeyPair,
    decode_public_key,
    decode_seed,
    from_public_key,
    from_seed,
    generate,
    public_key,
)

__all__ = [
    "KeyClass",
    "KeyPair",
    "decode_public_key",
    "decode_seed",
    "from_public_key",
    "from_seed",
    "generate",
    "public_key",
]
