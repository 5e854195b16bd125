# Copyright (c) Natz Contributors. All rights reserved.
# Licensed under the MIT License.
"""
Signer

Encodes claims as NATS JWTs signed with an nkeys keypair, and decodes them
back for verification.

Token layout: ``base64url(header) "." base64url(payload) "." base64url(sig)``
with the header ``{"typ":"JWT","alg":"ed25519-nkey"}``. The payload is
serialized as canonical JSON (sorted keys, no whitespace) and its ``jti`` is
the base32 SHA-256 of the payload without ``jti``, so equal claims signed by
the same key always yield byte-identical tokens.
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import json
import logging
from typing import Any

from natz.exceptions import InvalidPublicKeyError, KeypairError, SigningFailedError, TokenError
from natz.jwt.claims import Claims
from natz.keys.nkeys import KeyPair, from_public_key

logger = logging.getLogger(__name__)

ALGORITHM = "ed25519-nkey"
TOKEN_TYPE = "JWT"
HEADER = {"typ": TOKEN_TYPE, "alg": ALGORITHM}


def _base64url_encode(data: bytes) -> str:
    """Encode bytes as base64url without padding per RFC 7515."""
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def _base64url_decode(s: str) -> bytes:
    """Decode base64url string without padding per RFC 7515."""
    padding = 4 - len(s) % 4
    if padding != 4:
        s += "=" * padding
    return base64.urlsafe_b64decode(s)


def _canonical(obj: Any) -> bytes:
    return json.dumps(obj, sort_keys=True, separators=(",", ":")).encode("utf-8")


def _hash_id(payload: dict[str, Any]) -> str:
    digest = hashlib.sha256(_canonical(payload)).digest()
    return base64.b32encode(digest).rstrip(b"=").decode("ascii")


def encode(claims: Claims, keypair: KeyPair) -> str:
    """Sign ``claims`` with ``keypair`` and return the compact token.

    The keypair's public key becomes the ``iss`` of the token.

    Raises:
        SigningFailedError: If the keypair cannot sign.
    """
    if not keypair.can_sign:
        raise SigningFailedError(
            f"cannot sign {claims.kind.value} claim with public-only key {keypair.public_key}"
        )

    payload = claims.payload(keypair.public_key)
    payload["jti"] = _hash_id(payload)

    signing_input = f"{_base64url_encode(_canonical(HEADER))}.{_base64url_encode(_canonical(payload))}"
    try:
        signature = keypair.sign(signing_input.encode("ascii"))
    except (KeypairError, ValueError, TypeError) as exc:
        raise SigningFailedError(f"failed to sign {claims.kind.value} claim: {exc}") from exc

    logger.debug(
        "Signed %s claim for %s with %s", claims.kind.value, claims.subject, keypair.public_key
    )
    return f"{signing_input}.{_base64url_encode(signature)}"


def decode(token: str, verify: bool = True) -> dict[str, Any]:
    """Decode a token and return its payload.

    Args:
        token: Compact JWT.
        verify: Check the signature against the ``iss`` public key.

    Raises:
        TokenError: If the token is malformed, uses another algorithm, or
            the signature does not verify.
    """
    parts = token.split(".")
    if len(parts) != 3:
        raise TokenError("token must have three dot-separated parts")

    try:
        header = json.loads(_base64url_decode(parts[0]))
        payload = json.loads(_base64url_decode(parts[1]))
        signature = _base64url_decode(parts[2])
    except (binascii.Error, ValueError) as exc:
        raise TokenError(f"malformed token: {exc}") from exc

    if not isinstance(header, dict) or header.get("alg") != ALGORITHM:
        raise TokenError(f"unsupported token algorithm: {header!r}")
    if header.get("typ") != TOKEN_TYPE:
        raise TokenError(f"unsupported token type: {header.get('typ')!r}")
    if not isinstance(payload, dict):
        raise TokenError("token payload is not an object")

    if verify:
        iss = payload.get("iss")
        if not isinstance(iss, str) or not iss:
            raise TokenError(f"token issuer must be a public key, got {iss!r}")
        try:
            issuer = from_public_key(iss)
        except InvalidPublicKeyError as exc:
            raise TokenError(f"invalid issuer: {exc}") from exc
        signing_input = f"{parts[0]}.{parts[1]}".encode("ascii")
        if not issuer.verify(signing_input, signature):
            raise TokenError("token signature verification failed")

    return payload


__all__ = [
    "ALGORITHM",
    "HEADER",
    "encode",
    "decode",
]
