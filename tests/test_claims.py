"""Tests for the claim builders."""

from datetime import datetime, timedelta, timezone

import pytest

from natz.api import (
    AccountLimits,
    AccountReference,
    Export,
    ExportType,
    Import,
    KeyReference,
    NatsAccountSpec,
    NatsActivationSpec,
    NatsUserSpec,
    Permission,
    Permissions,
    ResponsePermission,
    UserLimits,
)
from natz.exceptions import AuthorizationViolationError, MissingReferenceError
from natz.jwt import (
    ISSUER_CLASSES,
    ClaimKind,
    account_claims,
    activation_claims,
    authorize_signer,
    operator_claims,
    revocation_claims,
    user_claims,
)
from natz.keys import KeyClass, generate


@pytest.fixture
def account_spec():
    return NatsAccountSpec(
        private_key=KeyReference(name="acct-key"),
        signer_key_ref=KeyReference(name="op-key"),
        exports=[
            Export(name="orders", subject="orders.>", type=ExportType.SERVICE, token_req=True,
                   response_threshold=timedelta(seconds=2)),
        ],
        imports=[Import(subject="billing.>", account="ABILLING")],
        limits=AccountLimits(conn=10, disk_storage=1024),
        revocations={"UREVOKED": 1700000000},
    )


def _user_spec(**kwargs):
    return NatsUserSpec(
        private_key=KeyReference(name="user-key"),
        signer_key_ref=KeyReference(name="acct-key"),
        account_ref=AccountReference(name="acct"),
        **kwargs,
    )


class TestOperatorClaims:
    def test_minimal(self):
        claims = operator_claims("OPUB", name="op", issued_at=100)
        assert claims.kind == ClaimKind.OPERATOR
        assert claims.subject == "OPUB"
        assert claims.data == {"type": "operator", "version": 2}

    def test_signing_keys_deduplicated_in_order(self):
        claims = operator_claims("OPUB", signing_keys=["OB", "OA", "OB"])
        assert claims.data["signing_keys"] == ["OB", "OA"]

    def test_missing_public_key(self):
        with pytest.raises(MissingReferenceError):
            operator_claims("")


class TestAccountClaims:
    def test_deterministic(self, account_spec):
        first = account_claims("APUB", account_spec, name="acct", signing_keys=["ASK"], issued_at=5)
        second = account_claims("APUB", account_spec, name="acct", signing_keys=["ASK"], issued_at=5)
        assert first == second

    def test_payload_shape(self, account_spec):
        data = account_claims("APUB", account_spec, signing_keys=["ASK"]).data
        assert data["type"] == "account"
        assert data["version"] == 2
        assert data["signing_keys"] == ["ASK"]
        assert data["revocations"] == {"UREVOKED": 1700000000}
        assert data["imports"] == [{"subject": "billing.>", "account": "ABILLING", "type": "stream"}]

        export = data["exports"][0]
        assert export["subject"] == "orders.>"
        assert export["type"] == "service"
        assert export["token_req"] is True
        assert export["response_threshold"] == 2_000_000_000

    def test_limits_keep_unlimited_markers(self, account_spec):
        limits = account_claims("APUB", account_spec).data["limits"]
        assert limits["conn"] == 10
        assert limits["subs"] == -1
        assert limits["leaf"] == -1
        assert limits["wildcards"] is True
        assert limits["disk_storage"] == 1024
        assert "mem_storage" not in limits
        assert "disallow_bearer" not in limits


class TestUserClaims:
    def test_permissions_are_copied_exactly(self):
        spec = _user_spec(permissions=Permissions(pub=Permission(allow=["orders.*"])))
        data = user_claims("UPUB", spec, issuer_account="APUB").data
        assert data["pub"] == {"allow": ["orders.*"]}
        assert "sub" not in data
        assert data["issuer_account"] == "APUB"
        assert data["type"] == "user"

    def test_limits_and_response_permission(self):
        spec = _user_spec(
            permissions=Permissions(resp=ResponsePermission(max=3, ttl=timedelta(seconds=1))),
            limits=UserLimits(src=["10.0.0.0/8"], payload=4096),
            bearer_token=True,
            allowed_connection_types=["STANDARD"],
        )
        data = user_claims("UPUB", spec, issuer_account="APUB").data
        assert data["resp"] == {"max": 3, "ttl": 1_000_000_000}
        assert data["src"] == ["10.0.0.0/8"]
        assert data["payload"] == 4096
        assert data["subs"] == -1
        assert data["bearer_token"] is True
        assert data["allowed_connection_types"] == ["STANDARD"]

    def test_requires_issuer_account(self):
        with pytest.raises(MissingReferenceError):
            user_claims("UPUB", _user_spec(), issuer_account="")


class TestActivationClaims:
    def test_window_and_subject(self):
        spec = NatsActivationSpec(
            account_ref=AccountReference(name="exporter"),
            target_account_ref=AccountReference(name="importer"),
            signer_key_ref=KeyReference(name="exporter-key"),
            subject="orders.private",
            start=datetime(2024, 1, 1, tzinfo=timezone.utc),
            expiry=datetime(2024, 2, 1, tzinfo=timezone.utc),
        )
        claims = activation_claims("AIMPORTER", spec, issuer_account="AEXPORTER")
        assert claims.subject == "AIMPORTER"
        assert claims.not_before == 1704067200
        assert claims.expires == 1706745600
        assert claims.data == {
            "subject": "orders.private",
            "kind": "stream",
            "issuer_account": "AEXPORTER",
            "type": "activation",
            "version": 2,
        }

    def test_expiry_must_follow_start(self):
        with pytest.raises(ValueError):
            NatsActivationSpec(
                account_ref=AccountReference(name="a"),
                target_account_ref=AccountReference(name="b"),
                signer_key_ref=KeyReference(name="k"),
                subject="x",
                start=datetime(2024, 2, 1, tzinfo=timezone.utc),
                expiry=datetime(2024, 1, 1, tzinfo=timezone.utc),
            )


class TestRevocationClaims:
    def test_accounts_list(self):
        claims = revocation_claims("OSIGNER", ["AONE"], issued_at=7)
        assert claims.kind == ClaimKind.GENERIC
        assert claims.subject == "OSIGNER"
        assert claims.data == {"accounts": ["AONE"]}
        assert "type" not in claims.data


class TestAuthorizeSigner:
    @pytest.mark.parametrize("kind", list(ClaimKind))
    def test_every_kind_has_issuers(self, kind):
        assert ISSUER_CLASSES[kind]

    def test_operator_signs_accounts(self):
        authorize_signer(ClaimKind.ACCOUNT, generate(KeyClass.OPERATOR))

    def test_user_cannot_sign_accounts(self):
        with pytest.raises(AuthorizationViolationError):
            authorize_signer(ClaimKind.ACCOUNT, generate(KeyClass.USER))

    def test_account_cannot_sign_accounts(self):
        with pytest.raises(AuthorizationViolationError):
            authorize_signer(ClaimKind.ACCOUNT, generate(KeyClass.ACCOUNT))

    def test_account_signs_users_and_activations(self):
        signer = generate(KeyClass.ACCOUNT)
        authorize_signer(ClaimKind.USER, signer)
        authorize_signer(ClaimKind.ACTIVATION, signer)
