# Copyright (c) Natz Contributors. All rights reserved.
# Licensed under the MIT License.
"""User credentials files (``.creds``): a user JWT plus its nkey seed."""

from typing import Union

from natz.exceptions import InvalidSeedError

_CREDS_TEMPLATE = """-----BEGIN NATS USER JWT-----
{jwt}
------END NATS USER JWT------

-----BEGIN USER NKEY SEED-----
{seed}
------END USER NKEY SEED------
"""


def format_user_credentials(token: str, seed: Union[str, bytes]) -> bytes:
    """Render the credentials file a NATS client connects with."""
    if isinstance(seed, bytes):
        seed = seed.decode("ascii")
    if not seed.startswith("SU"):
        raise InvalidSeedError("credentials need a user seed")
    return _CREDS_TEMPLATE.format(jwt=token, seed=seed).encode("ascii")


__all__ = ["format_user_credentials"]
