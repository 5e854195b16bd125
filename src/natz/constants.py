# Copyright (c) Natz Contributors. All rights reserved.
# Licensed under the MIT License.
"""Shared constants for natz."""

# Finalizer owned by the engine on every resource it synchronizes.
FINALIZER_NAME = "natz.dev/finalizer"
OWNER_ANNOTATION = "natz.dev/owner"

# Secret layout
SECRET_SEED_KEY = "seed.nk"
SECRET_PUBLIC_KEY = "key.pub"
SECRET_USER_JWT_KEY = "user.jwt"
SECRET_USER_CREDS_KEY = "user.creds"

SECRET_TYPE_KEY = "natz.dev/nats-key"
SECRET_TYPE_USER_CREDENTIALS = "natz.dev/nats-user-credentials"

# Condition types and reasons
CONDITION_TYPE_SYNCHRONIZED = "Synchronized"
CONDITION_TYPE_FAILED = "Failed"
CONDITION_REASON_SYNCHRONIZED = "Synchronized"
CONDITION_REASON_FAILED = "Failed"

# Control subjects of the NATS system account
SUBJECT_CLAIMS_UPDATE = "$SYS.REQ.CLAIMS.UPDATE"
SUBJECT_CLAIMS_DELETE = "$SYS.REQ.CLAIMS.DELETE"

# Retry timing (seconds)
DEFAULT_RETRY_BASE_SECONDS = 5.0
DEFAULT_RETRY_MULTIPLIER = 2.0
DEFAULT_RETRY_CEILING_SECONDS = 6 * 60 * 60.0
DEFAULT_CONFLICT_RETRY_SECONDS = 1.0

# NATS limits use -1 for "unlimited".
NO_LIMIT = -1
