"""
natz - Trust-chain reconciliation and credential issuance for NATS

Keeps a declared operator → account → user hierarchy, plus cross-account
activations, converged into signed NATS JWTs, and propagates account tokens
to a running cluster.

Version: 0.1.0
"""

__version__ = "0.1.0"

# Keys, claims and tokens
from .keys import KeyClass, KeyPair, from_seed, generate, public_key
from .jwt import ClaimKind, Claims, decode, encode, format_user_credentials

# Reconciliation and propagation
from .controllers import (
    AccountReconciler,
    AccountServer,
    ActivationReconciler,
    KeyReconciler,
    OperatorReconciler,
    Result,
    UserReconciler,
)

# Configuration
from .config import BackoffConfig, NatsConfig, ReconcilerConfig

# Exceptions
from .exceptions import (
    AuthorizationViolationError,
    InvalidSeedError,
    MissingReferenceError,
    NatzError,
    NotFoundError,
    PublishError,
    SigningFailedError,
    StaleWriteError,
    UnknownKeyClassError,
)

__all__ = [
    "__version__",
    "KeyClass",
    "KeyPair",
    "from_seed",
    "generate",
    "public_key",
    "ClaimKind",
    "Claims",
    "decode",
    "encode",
    "format_user_credentials",
    "AccountReconciler",
    "AccountServer",
    "ActivationReconciler",
    "KeyReconciler",
    "OperatorReconciler",
    "Result",
    "UserReconciler",
    "BackoffConfig",
    "NatsConfig",
    "ReconcilerConfig",
    "AuthorizationViolationError",
    "InvalidSeedError",
    "MissingReferenceError",
    "NatzError",
    "NotFoundError",
    "PublishError",
    "SigningFailedError",
    "StaleWriteError",
    "UnknownKeyClassError",
]
