"""
Resource types (v1alpha1)

Declarative specs and observed status for keys, operators, accounts, users
and activations, plus the secret records that hold key material.
"""

from .common import (
    AccountReference,
    Condition,
    ConditionStatus,
    IdentityResource,
    IdentityStatus,
    KeyReference,
    ObjectMeta,
    Phase,
    Resource,
)
from .key import NatsKey, NatsKeySpec
from .operator import NatsOperator, NatsOperatorSpec
from .account import (
    AccountLimits,
    Export,
    ExportType,
    Import,
    JetStreamLimits,
    NatsAccount,
    NatsAccountSpec,
    ResponseType,
    ServiceLatency,
)
from .user import (
    NatsUser,
    NatsUserSpec,
    Permission,
    Permissions,
    ResponsePermission,
    TimeRange,
    UserLimits,
)
from .activation import NatsActivation, NatsActivationSpec
from .secret import Secret

__all__ = [
    "AccountReference",
    "Condition",
    "ConditionStatus",
    "IdentityResource",
    "IdentityStatus",
    "KeyReference",
    "ObjectMeta",
    "Phase",
    "Resource",
    "NatsKey",
    "NatsKeySpec",
    "NatsOperator",
    "NatsOperatorSpec",
    "AccountLimits",
    "Export",
    "ExportType",
    "Import",
    "JetStreamLimits",
    "NatsAccount",
    "NatsAccountSpec",
    "ResponseType",
    "ServiceLatency",
    "NatsUser",
    "NatsUserSpec",
    "Permission",
    "Permissions",
    "ResponsePermission",
    "TimeRange",
    "UserLimits",
    "NatsActivation",
    "NatsActivationSpec",
    "Secret",
]
