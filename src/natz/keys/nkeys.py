# Copyright (c) Natz Contributors. All rights reserved.
# Licensed under the MIT License.
"""
Class-tagged Ed25519 keypairs in the nkeys text encoding.

A key is encoded as base32 (no padding) over a prefix byte naming its class,
the raw 32-byte key and a little-endian CRC16/XMODEM checksum. Seeds carry a
two-byte prefix: the seed marker ``S`` followed by the class letter, so an
account seed reads ``SA...`` and its public key ``A...``.
"""

from __future__ import annotations

import base64
import binascii
import logging
import os
from enum import Enum
from typing import Optional, Union

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ed25519

from natz.exceptions import (
    InvalidPublicKeyError,
    InvalidSeedError,
    KeypairError,
    SigningFailedError,
    UnknownKeyClassError,
)

logger = logging.getLogger(__name__)

PREFIX_BYTE_SEED = 18 << 3  # 'S'
PREFIX_BYTE_OPERATOR = 14 << 3  # 'O'
PREFIX_BYTE_ACCOUNT = 0  # 'A'
PREFIX_BYTE_USER = 20 << 3  # 'U'

SEED_LENGTH = 32


class KeyClass(str, Enum):
    """The three identity classes a keypair can belong to."""

    OPERATOR = "Operator"
    ACCOUNT = "Account"
    USER = "User"

    @property
    def prefix(self) -> int:
        return _PREFIXES[self]

    @classmethod
    def parse(cls, value: Union[str, "KeyClass"]) -> "KeyClass":
        """Resolve a class name (case-insensitive) or raise UnknownKeyClassError."""
        if isinstance(value, KeyClass):
            return value
        if isinstance(value, str):
            for member in cls:
                if member.value.lower() == value.lower():
                    return member
        raise UnknownKeyClassError(f"unknown key type: {value!r}")

    @classmethod
    def from_prefix(cls, prefix: int) -> Optional["KeyClass"]:
        for member, member_prefix in _PREFIXES.items():
            if member_prefix == prefix:
                return member
        return None


_PREFIXES = {
    KeyClass.OPERATOR: PREFIX_BYTE_OPERATOR,
    KeyClass.ACCOUNT: PREFIX_BYTE_ACCOUNT,
    KeyClass.USER: PREFIX_BYTE_USER,
}


def _crc16(data: bytes) -> bytes:
    return binascii.crc_hqx(data, 0).to_bytes(2, "little")


def _b32encode(raw: bytes) -> bytes:
    return base64.b32encode(raw).rstrip(b"=")


def _b32decode(text: bytes) -> bytes:
    padding = (-len(text)) % 8
    return base64.b32decode(text + b"=" * padding)


def _to_bytes(value: Union[str, bytes]) -> bytes:
    if isinstance(value, str):
        return value.strip().encode("ascii")
    return bytes(value).strip()


def _decode_checked(text: bytes) -> bytes:
    raw = _b32decode(text)
    if len(raw) < 4:
        raise ValueError("encoded key too short")
    body, checksum = raw[:-2], raw[-2:]
    if _crc16(body) != checksum:
        raise ValueError("invalid checksum")
    return body


def encode_public_key(key_class: KeyClass, raw: bytes) -> str:
    """Encode 32 raw public key bytes for ``key_class``."""
    body = bytes([key_class.prefix]) + raw
    return _b32encode(body + _crc16(body)).decode("ascii")


def encode_seed(key_class: KeyClass, raw: bytes) -> bytes:
    """Encode a 32-byte Ed25519 seed for ``key_class``."""
    if len(raw) != SEED_LENGTH:
        raise InvalidSeedError(f"seed must be {SEED_LENGTH} bytes, got {len(raw)}")
    prefix = key_class.prefix
    body = bytes([PREFIX_BYTE_SEED | (prefix >> 5), (prefix & 31) << 3]) + raw
    return _b32encode(body + _crc16(body))


def decode_seed(seed: Union[str, bytes]) -> tuple[KeyClass, bytes]:
    """Split an encoded seed into its class and raw seed bytes.

    Raises:
        InvalidSeedError: If the seed is malformed, fails its checksum, or
            belongs to a class other than Operator, Account or User.
    """
    try:
        body = _decode_checked(_to_bytes(seed))
    except (binascii.Error, ValueError, UnicodeError) as exc:
        raise InvalidSeedError(f"invalid seed: {exc}") from exc

    if len(body) != 2 + SEED_LENGTH:
        raise InvalidSeedError("invalid seed length")
    if body[0] & 248 != PREFIX_BYTE_SEED:
        raise InvalidSeedError("not a seed")

    prefix = ((body[0] & 7) << 5) | ((body[1] & 248) >> 3)
    key_class = KeyClass.from_prefix(prefix)
    if key_class is None:
        raise InvalidSeedError(f"seed has unsupported key class prefix {prefix}")
    return key_class, body[2:]


def decode_public_key(public_key: Union[str, bytes]) -> tuple[KeyClass, bytes]:
    """Split an encoded public key into its class and raw key bytes."""
    try:
        body = _decode_checked(_to_bytes(public_key))
    except (binascii.Error, ValueError, UnicodeError) as exc:
        raise InvalidPublicKeyError(f"invalid public key: {exc}") from exc

    key_class = KeyClass.from_prefix(body[0])
    if key_class is None or len(body) != 1 + 32:
        raise InvalidPublicKeyError("invalid public key prefix or length")
    return key_class, body[1:]


class KeyPair:
    """A class-tagged Ed25519 keypair.

    Built from a seed it can sign; built from a public key it can only verify.

    Example:
        >>> kp = generate(KeyClass.ACCOUNT)
        >>> kp.public_key.startswith("A")
        True
        >>> kp.verify(b"hello", kp.sign(b"hello"))
        True
    """

    def __init__(
        self,
        key_class: KeyClass,
        public_bytes: bytes,
        private_key: Optional[ed25519.Ed25519PrivateKey] = None,
    ) -> None:
        self._key_class = key_class
        self._public_bytes = public_bytes
        self._private_key = private_key

    @property
    def key_class(self) -> KeyClass:
        return self._key_class

    @property
    def public_key(self) -> str:
        return encode_public_key(self._key_class, self._public_bytes)

    @property
    def can_sign(self) -> bool:
        return self._private_key is not None

    @property
    def seed(self) -> bytes:
        """The encoded seed.

        Raises:
            KeypairError: If this is a verify-only keypair.
        """
        if self._private_key is None:
            raise KeypairError("no seed available for a public-only keypair")
        raw = self._private_key.private_bytes(
            encoding=serialization.Encoding.Raw,
            format=serialization.PrivateFormat.Raw,
            encryption_algorithm=serialization.NoEncryption(),
        )
        return encode_seed(self._key_class, raw)

    def sign(self, data: bytes) -> bytes:
        """Sign *data* with the private key.

        Raises:
            SigningFailedError: If this keypair has no private key.
        """
        if self._private_key is None:
            raise SigningFailedError(
                f"cannot sign with public-only {self._key_class.value} key {self.public_key}"
            )
        return self._private_key.sign(data)

    def verify(self, data: bytes, signature: bytes) -> bool:
        try:
            ed25519.Ed25519PublicKey.from_public_bytes(self._public_bytes).verify(signature, data)
            return True
        except (InvalidSignature, ValueError):
            return False

    def __repr__(self) -> str:
        return f"KeyPair({self._key_class.value}, {self.public_key})"


def generate(key_class: Union[str, KeyClass]) -> KeyPair:
    """Generate a new random keypair of the given class.

    Raises:
        UnknownKeyClassError: If ``key_class`` is not Operator, Account or User.
    """
    kc = KeyClass.parse(key_class)
    keypair = from_raw_seed(kc, os.urandom(SEED_LENGTH))
    logger.info("Generated %s keypair %s", kc.value, keypair.public_key)
    return keypair


def from_raw_seed(key_class: KeyClass, raw: bytes) -> KeyPair:
    if len(raw) != SEED_LENGTH:
        raise InvalidSeedError(f"seed must be {SEED_LENGTH} bytes, got {len(raw)}")
    private_key = ed25519.Ed25519PrivateKey.from_private_bytes(raw)
    public_bytes = private_key.public_key().public_bytes(
        encoding=serialization.Encoding.Raw,
        format=serialization.PublicFormat.Raw,
    )
    return KeyPair(key_class, public_bytes, private_key)


def from_seed(seed: Union[str, bytes]) -> KeyPair:
    """Load a signing keypair from an encoded seed."""
    key_class, raw = decode_seed(seed)
    return from_raw_seed(key_class, raw)


def from_public_key(public_key: Union[str, bytes]) -> KeyPair:
    """Load a verify-only keypair from an encoded public key."""
    key_class, raw = decode_public_key(public_key)
    return KeyPair(key_class, raw)


def public_key(seed: Union[str, bytes]) -> str:
    """Derive the encoded public key for an encoded seed."""
    return from_seed(seed).public_key


__all__ = [
    "KeyClass",
    "KeyPair",
    "generate",
    "from_seed",
    "from_raw_seed",
    "from_public_key",
    "public_key",
    "encode_seed",
    "decode_seed",
    "encode_public_key",
    "decode_public_key",
]
