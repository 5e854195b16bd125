"""
Trust-chain reconcilers and the account server.

Each reconciler exposes ``reconcile(namespace, name) -> Result`` and is safe
to call repeatedly with the same key; the dispatcher decides when to call it
again from the returned Result.
"""

from .account import AccountReconciler
from .account_server import AccountServer
from .activation import ActivationReconciler
from .base import Controller, Reconciler, Result
from .key import KeyReconciler
from .operator import OperatorReconciler
from .user import UserReconciler

__all__ = [
    "AccountReconciler",
    "AccountServer",
    "ActivationReconciler",
    "Controller",
    "KeyReconciler",
    "OperatorReconciler",
    "Reconciler",
    "Result",
    "UserReconciler",
]
