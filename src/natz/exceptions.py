# Copyright (c) Natz Contributors. All rights reserved.
# Licensed under the MIT License.
"""Centralized exception hierarchy for natz.

All natz exceptions inherit from NatzError, so a reconciliation pass can
catch every engine failure at one boundary and turn it into a ``Failed``
condition plus a backoff requeue.
"""


class NatzError(Exception):
    """Base exception for all natz errors."""


class KeypairError(NatzError):
    """Errors related to keypairs (seeds, classes, encodings)."""


class UnknownKeyClassError(KeypairError):
    """Raised for a key class outside Operator, Account and User."""


class InvalidSeedError(KeypairError):
    """Raised when a seed is malformed or belongs to the wrong class."""


class InvalidPublicKeyError(KeypairError):
    """Raised when an encoded public key cannot be decoded."""


class SigningFailedError(NatzError):
    """Raised when a claim cannot be signed with the given handle."""


class TokenError(NatzError):
    """Raised when a token cannot be decoded or fails verification."""


class AuthorizationViolationError(NatzError):
    """Raised when a keypair class is not allowed to sign a claim kind."""


class NotFoundError(NatzError):
    """A referenced object or secret does not exist (retryable)."""


class MissingReferenceError(NotFoundError):
    """A referenced key or parent identity could not be resolved."""


class StorageError(NatzError):
    """Errors related to storage backend operations."""


class StaleWriteError(StorageError):
    """Optimistic-concurrency conflict; re-read before retrying."""


class PublishError(NatzError):
    """Publishing a control message to the cluster failed."""


__all__ = [
    "NatzError",
    "KeypairError",
    "UnknownKeyClassError",
    "InvalidSeedError",
    "InvalidPublicKeyError",
    "SigningFailedError",
    "TokenError",
    "AuthorizationViolationError",
    "NotFoundError",
    "MissingReferenceError",
    "StorageError",
    "StaleWriteError",
    "PublishError",
]
