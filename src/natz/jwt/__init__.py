"""
Claims, signing and credential files for the NATS decentralized JWT model.
"""

from .claims import (
    ISSUER_CLASSES,
    ClaimKind,
    Claims,
    account_claims,
    activation_claims,
    authorize_signer,
    operator_claims,
    revocation_claims,
    user_claims,
)
from .creds import format_user_credentials
from .signer import decode, encode

__all__ = [
    "ISSUER_CLASSES",
    "ClaimKind",
    "Claims",
    "account_claims",
    "activation_claims",
    "authorize_signer",
    "operator_claims",
    "revocation_claims",
    "user_claims",
    "format_user_credentials",
    "decode",
    "encode",
]
