# Copyright (c) Natz Contributors. All rights reserved.
# Licensed under the MIT License.
"""
Claim Builder

Pure functions that turn a resource spec plus resolved public keys into the
claim document for each identity class. Output depends only on the inputs:
the same spec and keys always produce an equal claim, which is what makes
re-signing an unchanged resource yield the same token.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Iterable, Optional

from natz.api.account import Export, NatsAccountSpec
from natz.api.activation import NatsActivationSpec
from natz.api.user import NatsUserSpec
from natz.exceptions import AuthorizationViolationError, MissingReferenceError
from natz.keys.nkeys import KeyClass, KeyPair

CLAIM_VERSION = 2


class ClaimKind(str, Enum):
    """What a claim describes; also the ``type`` field of its payload."""

    OPERATOR = "operator"
    ACCOUNT = "account"
    USER = "user"
    ACTIVATION = "activation"
    GENERIC = "generic"


# Which keypair classes may sign each kind of claim.
ISSUER_CLASSES: dict[ClaimKind, frozenset[KeyClass]] = {
    ClaimKind.OPERATOR: frozenset({KeyClass.OPERATOR}),
    ClaimKind.ACCOUNT: frozenset({KeyClass.OPERATOR}),
    ClaimKind.USER: frozenset({KeyClass.ACCOUNT}),
    ClaimKind.ACTIVATION: frozenset({KeyClass.ACCOUNT}),
    ClaimKind.GENERIC: frozenset({KeyClass.OPERATOR, KeyClass.ACCOUNT}),
}


def authorize_signer(kind: ClaimKind, signer: KeyPair) -> None:
    """Raise AuthorizationViolationError unless ``signer`` may sign ``kind`` claims."""
    if signer.key_class not in ISSUER_CLASSES[kind]:
        raise AuthorizationViolationError(
            f"a {signer.key_class.value} key ({signer.public_key}) cannot sign {kind.value} claims"
        )


@dataclass(frozen=True)
class Claims:
    """A signable claim document, everything except the issuer and ``jti``."""

    kind: ClaimKind
    subject: str
    data: dict[str, Any] = field(default_factory=dict)
    name: str = ""
    issued_at: int = 0
    not_before: int = 0
    expires: int = 0

    def payload(self, issuer: str) -> dict[str, Any]:
        """Render the JWT payload as issued by ``issuer``."""
        body: dict[str, Any] = {"iss": issuer, "sub": self.subject}
        if self.name:
            body["name"] = self.name
        if self.issued_at:
            body["iat"] = self.issued_at
        if self.not_before:
            body["nbf"] = self.not_before
        if self.expires:
            body["exp"] = self.expires
        if self.data:
            body["nats"] = self.data
        return body


def _compact(value: Any) -> Any:
    """Drop empty values the way the NATS claim encoder omits them."""
    if isinstance(value, dict):
        out = {}
        for key, item in value.items():
            item = _compact(item)
            if _is_empty(item):
                continue
            out[key] = item
        return out
    if isinstance(value, list):
        return [_compact(item) for item in value]
    return value


def _is_empty(value: Any) -> bool:
    if value is None or value is False:
        return True
    if isinstance(value, (str, list, dict)) and not value:
        return True
    return isinstance(value, int) and not isinstance(value, bool) and value == 0


def _nanoseconds(value: Optional[timedelta]) -> int:
    if value is None:
        return 0
    return (value.days * 86_400 + value.seconds) * 1_000_000_000 + value.microseconds * 1_000


def _unix(value: Optional[datetime]) -> int:
    if value is None:
        return 0
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return int(value.timestamp())


def _unique(keys: Iterable[str]) -> list[str]:
    return list(dict.fromkeys(k for k in keys if k))


def _require(value: str, what: str) -> str:
    if not value:
        raise MissingReferenceError(f"{what} is not resolved")
    return value


def _export(export: Export) -> dict[str, Any]:
    data = export.model_dump(mode="json", exclude={"response_threshold", "revocations"})
    data["response_threshold"] = _nanoseconds(export.response_threshold)
    data["revocations"] = dict(sorted(export.revocations.items()))
    return data


def operator_claims(
    public_key: str,
    name: str = "",
    signing_keys: Iterable[str] = (),
    issued_at: int = 0,
) -> Claims:
    """Build the self-describing claim of an operator."""
    data = _compact(
        {
            "signing_keys": _unique(signing_keys),
            "type": ClaimKind.OPERATOR.value,
            "version": CLAIM_VERSION,
        }
    )
    return Claims(
        kind=ClaimKind.OPERATOR,
        subject=_require(public_key, "operator public key"),
        data=data,
        name=name,
        issued_at=issued_at,
    )


def account_claims(
    public_key: str,
    spec: NatsAccountSpec,
    name: str = "",
    signing_keys: Iterable[str] = (),
    issued_at: int = 0,
) -> Claims:
    """Build an account claim embedding imports, exports, limits and its signing-key pool."""
    data = _compact(
        {
            "imports": [imp.model_dump(mode="json") for imp in spec.imports],
            "exports": [_export(exp) for exp in spec.exports],
            "limits": spec.limits.model_dump(mode="json"),
            "signing_keys": _unique(signing_keys),
            "revocations": dict(sorted(spec.revocations.items())),
            "type": ClaimKind.ACCOUNT.value,
            "version": CLAIM_VERSION,
        }
    )
    return Claims(
        kind=ClaimKind.ACCOUNT,
        subject=_require(public_key, "account public key"),
        data=data,
        name=name,
        issued_at=issued_at,
    )


def user_claims(
    public_key: str,
    spec: NatsUserSpec,
    issuer_account: str,
    name: str = "",
    issued_at: int = 0,
) -> Claims:
    """Build a user claim.

    ``issuer_account`` is the owning account's public key, so a token signed
    by one of the account's signing keys still names the account itself.
    """
    permissions = spec.permissions
    resp = None
    if permissions.resp is not None:
        resp = {"max": permissions.resp.max, "ttl": _nanoseconds(permissions.resp.ttl)}

    data = _compact(
        {
            "pub": permissions.pub.model_dump(mode="json"),
            "sub": permissions.sub.model_dump(mode="json"),
            "resp": resp,
            **spec.limits.model_dump(mode="json"),
            "bearer_token": spec.bearer_token,
            "allowed_connection_types": list(spec.allowed_connection_types),
            "issuer_account": _require(issuer_account, "issuer account public key"),
            "type": ClaimKind.USER.value,
            "version": CLAIM_VERSION,
        }
    )
    return Claims(
        kind=ClaimKind.USER,
        subject=_require(public_key, "user public key"),
        data=data,
        name=name,
        issued_at=issued_at,
    )


def activation_claims(
    target_public_key: str,
    spec: NatsActivationSpec,
    issuer_account: str,
    issued_at: int = 0,
) -> Claims:
    """Build an activation granting ``target_public_key`` an import of ``spec.subject``."""
    data = _compact(
        {
            "subject": spec.subject,
            "kind": spec.export_type.value,
            "issuer_account": _require(issuer_account, "exporting account public key"),
            "type": ClaimKind.ACTIVATION.value,
            "version": CLAIM_VERSION,
        }
    )
    return Claims(
        kind=ClaimKind.ACTIVATION,
        subject=_require(target_public_key, "importing account public key"),
        data=data,
        name=spec.subject,
        issued_at=issued_at,
        not_before=_unix(spec.start),
        expires=_unix(spec.expiry),
    )


def revocation_claims(
    issuer_public_key: str,
    accounts: Iterable[str],
    issued_at: int = 0,
) -> Claims:
    """Build the generic claim asking the cluster to drop ``accounts``."""
    return Claims(
        kind=ClaimKind.GENERIC,
        subject=_require(issuer_public_key, "revocation issuer public key"),
        data={"accounts": _unique(accounts)},
        issued_at=issued_at,
    )


__all__ = [
    "CLAIM_VERSION",
    "ClaimKind",
    "Claims",
    "ISSUER_CLASSES",
    "authorize_signer",
    "operator_claims",
    "account_claims",
    "user_claims",
    "activation_claims",
    "revocation_claims",
]
