# Copyright (c) Natz Contributors. All rights reserved.
# Licensed under the MIT License.
"""
Condition helpers.

A status holds at most one condition per type. Setting a condition whose type
is already present leaves the list untouched, so the history keeps the first
reason recorded for each type.
"""

from natz.api.common import Condition, ConditionStatus, IdentityResource, IdentityStatus, utcnow
from natz.constants import (
    CONDITION_REASON_FAILED,
    CONDITION_REASON_SYNCHRONIZED,
    CONDITION_TYPE_FAILED,
    CONDITION_TYPE_SYNCHRONIZED,
)


def set_condition(status: IdentityStatus, condition: Condition) -> bool:
    """Insert ``condition`` unless one of the same type exists.

    Returns:
        True if the condition was added.
    """
    if status.get_condition(condition.type) is not None:
        return False
    status.conditions.append(condition)
    return True


def new_synchronized_condition(obj: IdentityResource) -> Condition:
    label = obj.kind.removeprefix("Nats").lower()
    return Condition(
        type=CONDITION_TYPE_SYNCHRONIZED,
        status=ConditionStatus.TRUE,
        reason=CONDITION_REASON_SYNCHRONIZED,
        message=f"the {label} has successfully created: {obj.name}",
        last_transition_time=utcnow(),
        observed_generation=obj.metadata.generation,
    )


def new_failed_condition(obj: IdentityResource, err: Exception) -> Condition:
    return Condition(
        type=CONDITION_TYPE_FAILED,
        status=ConditionStatus.TRUE,
        reason=CONDITION_REASON_FAILED,
        message=str(err),
        last_transition_time=utcnow(),
        observed_generation=obj.metadata.generation,
    )


__all__ = [
    "set_condition",
    "new_synchronized_condition",
    "new_failed_condition",
]
