"""End-to-end trust chain: operator, account, user and activation."""

from datetime import datetime, timezone

import pytest

from natz.api import ExportType, ObjectMeta, Permission, Permissions, Secret
from natz.constants import SECRET_SEED_KEY, SUBJECT_CLAIMS_UPDATE
from natz.jwt import decode
from natz.keys import KeyClass, generate, public_key


async def _seeded_key(engine, name, key_class):
    """Declare a key whose seed already exists in its secret."""
    keypair = generate(key_class)
    await engine.store.put_secret(
        Secret(metadata=ObjectMeta(name=name), data={SECRET_SEED_KEY: keypair.seed})
    )
    return keypair.seed, await engine.key(name, key_class)


class TestTrustChain:
    @pytest.mark.asyncio
    async def test_operator_signs_account(self, engine):
        operator_seed, operator_key = await _seeded_key(engine, "op-key", KeyClass.OPERATOR)
        account_seed, account_key = await _seeded_key(engine, "acct-key", KeyClass.ACCOUNT)
        assert operator_key == public_key(operator_seed)
        assert account_key == public_key(account_seed)

        operator = await engine.operator()
        account = await engine.account("acct", "acct-key")

        assert operator.status.public_key == operator_key
        payload = decode(account.status.token)
        assert payload["sub"] == account_key
        assert payload["iss"] == operator_key
        assert engine.publisher.on_subject(SUBJECT_CLAIMS_UPDATE) == [account.status.token.encode()]

    @pytest.mark.asyncio
    async def test_user_signed_by_account_signing_key(self, engine):
        _, account = await engine.chain()
        signing_key = await engine.keystore.get_public_key("default", "acct-signing-key")
        await engine.key("user-key", KeyClass.USER)

        user = await engine.user(
            "alice",
            "user-key",
            "acct",
            signer="acct-signing-key",
            permissions=Permissions(pub=Permission(allow=["orders.*"])),
        )

        assert user.is_synchronized
        payload = decode(user.status.token)
        assert payload["iss"] == signing_key
        assert payload["nats"]["issuer_account"] == account.status.public_key
        assert payload["nats"]["pub"] == {"allow": ["orders.*"]}
        assert "sub" not in payload["nats"]
        assert signing_key in decode(account.status.token)["nats"]["signing_keys"]

    @pytest.mark.asyncio
    async def test_activation_window(self, engine):
        _, exporter = await engine.chain()
        await engine.key("importer-key", KeyClass.ACCOUNT)
        importer = await engine.account("importer", "importer-key")

        activation = await engine.activation(
            "grant",
            "acct",
            "importer",
            signer="acct-key",
            subject="orders.private",
            start=datetime(2024, 1, 1, tzinfo=timezone.utc),
            expiry=datetime(2024, 2, 1, tzinfo=timezone.utc),
            export_type=ExportType.SERVICE,
        )

        payload = decode(activation.status.token)
        assert payload["nbf"] == 1704067200
        assert payload["exp"] == 1706745600
        assert payload["sub"] == importer.status.public_key
        assert payload["nats"]["subject"] == "orders.private"
        assert payload["nats"]["kind"] == "service"
        assert payload["nats"]["issuer_account"] == exporter.status.public_key

    @pytest.mark.asyncio
    async def test_tokens_are_stable_across_passes(self, engine):
        operator, account = await engine.chain()
        for reconciler, name in ((engine.operators, "op"), (engine.accounts, "acct")):
            await reconciler.reconcile("default", name)

        assert engine.metrics.sample("natz_token_issued_total", {"kind": "NatsAccount"}) == 1.0
        assert engine.metrics.sample("natz_token_issued_total", {"kind": "NatsOperator"}) == 1.0
        assert len(engine.publisher.on_subject(SUBJECT_CLAIMS_UPDATE)) == 1
