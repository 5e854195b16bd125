"""Shared fixtures: an in-memory store, publisher and a wired-up engine."""

import pytest

from natz.api import (
    AccountReference,
    KeyReference,
    NatsAccount,
    NatsAccountSpec,
    NatsActivation,
    NatsActivationSpec,
    NatsKey,
    NatsKeySpec,
    NatsOperator,
    NatsOperatorSpec,
    NatsUser,
    NatsUserSpec,
    ObjectMeta,
)
from natz.config import ReconcilerConfig
from natz.controllers import (
    AccountReconciler,
    AccountServer,
    ActivationReconciler,
    KeyReconciler,
    OperatorReconciler,
    Reconciler,
    Result,
    UserReconciler,
)
from natz.events import Event, InMemoryEventBus
from natz.keys import KeyClass
from natz.keys.keystore import SecretKeyStore
from natz.observability import MetricsCollector
from natz.storage import MemoryObjectStore
from natz.transport import MemoryPublisher

NAMESPACE = "default"


class Engine:
    """All reconcilers over one store, plus helpers to declare resources."""

    def __init__(self, store: MemoryObjectStore, publisher: MemoryPublisher):
        self.store = store
        self.publisher = publisher
        self.events = InMemoryEventBus()
        self.recorded: list[Event] = []
        self.events.subscribe("*", self.recorded.append)
        self.metrics = MetricsCollector()
        self.config = ReconcilerConfig()
        self.keystore = SecretKeyStore(store)

        common = dict(keys=self.keystore, events=self.events, config=self.config, metrics=self.metrics)
        self.keys = KeyReconciler(store, **common)
        self.server = AccountServer(store, publisher, **common)
        self.operators = OperatorReconciler(store, **common)
        self.accounts = AccountReconciler(store, self.server, **common)
        self.users = UserReconciler(store, **common)
        self.activations = ActivationReconciler(store, **common)

    async def converge(
        self, reconciler: Reconciler, name: str, namespace: str = NAMESPACE, max_passes: int = 10
    ) -> Result:
        """Run passes until one asks for no immediate requeue."""
        result = Result()
        for _ in range(max_passes):
            result = await reconciler.reconcile(namespace, name)
            if not result.requeue or result.requeue_after > 0:
                return result
        return result

    def event_types(self) -> list[str]:
        return [e.event_type for e in self.recorded]

    async def key(self, name: str, key_class: KeyClass, namespace: str = NAMESPACE, **spec) -> str:
        await self.store.create(
            NatsKey(
                metadata=ObjectMeta(name=name, namespace=namespace),
                spec=NatsKeySpec(type=key_class, **spec),
            )
        )
        await self.converge(self.keys, name, namespace)
        key = await self.store.get(NatsKey, namespace, name)
        return key.status.public_key

    async def operator(self, name: str = "op", key: str = "op-key", signing_keys=(), **spec) -> NatsOperator:
        await self.store.create(
            NatsOperator(
                metadata=ObjectMeta(name=name, namespace=NAMESPACE),
                spec=NatsOperatorSpec(
                    private_key=KeyReference(name=key),
                    signing_keys=[KeyReference(name=k) for k in signing_keys],
                    **spec,
                ),
            )
        )
        await self.converge(self.operators, name)
        return await self.store.get(NatsOperator, NAMESPACE, name)

    async def account(
        self,
        name: str,
        key: str,
        signer: str = "op-key",
        signing_keys=(),
        namespace: str = NAMESPACE,
        publish: bool = True,
        **spec,
    ) -> NatsAccount:
        await self.store.create(
            NatsAccount(
                metadata=ObjectMeta(name=name, namespace=namespace),
                spec=NatsAccountSpec(
                    private_key=KeyReference(name=key),
                    signer_key_ref=KeyReference(name=signer),
                    signing_keys=[KeyReference(name=k) for k in signing_keys],
                    **spec,
                ),
            )
        )
        await self.converge(self.accounts, name, namespace)
        if publish:
            await self.server.reconcile(namespace, name)
        return await self.store.get(NatsAccount, namespace, name)

    async def user(
        self,
        name: str,
        key: str,
        account: str,
        signer: str,
        namespace: str = NAMESPACE,
        account_namespace: str = "",
        **spec,
    ) -> NatsUser:
        await self.store.create(
            NatsUser(
                metadata=ObjectMeta(name=name, namespace=namespace),
                spec=NatsUserSpec(
                    private_key=KeyReference(name=key),
                    signer_key_ref=KeyReference(name=signer),
                    account_ref=AccountReference(name=account, namespace=account_namespace),
                    **spec,
                ),
            )
        )
        await self.converge(self.users, name, namespace)
        return await self.store.get(NatsUser, namespace, name)

    async def activation(
        self, name: str, account: str, target: str, signer: str, subject: str, **spec
    ) -> NatsActivation:
        await self.store.create(
            NatsActivation(
                metadata=ObjectMeta(name=name, namespace=NAMESPACE),
                spec=NatsActivationSpec(
                    account_ref=AccountReference(name=account),
                    target_account_ref=AccountReference(name=target),
                    signer_key_ref=KeyReference(name=signer),
                    subject=subject,
                    **spec,
                ),
            )
        )
        await self.converge(self.activations, name)
        return await self.store.get(NatsActivation, NAMESPACE, name)

    async def chain(self) -> tuple[NatsOperator, NatsAccount]:
        """Declare an operator and an account with one account signing key."""
        await self.key("op-key", KeyClass.OPERATOR)
        await self.key("acct-key", KeyClass.ACCOUNT)
        await self.key("acct-signing-key", KeyClass.ACCOUNT)
        operator = await self.operator()
        account = await self.account("acct", "acct-key", signing_keys=["acct-signing-key"])
        return operator, account


@pytest.fixture
async def store():
    """Create and connect an in-memory object store."""
    store = MemoryObjectStore()
    await store.connect()
    yield store
    await store.disconnect()


@pytest.fixture
async def publisher():
    """Create and connect an in-memory publisher."""
    publisher = MemoryPublisher()
    await publisher.connect()
    yield publisher
    await publisher.disconnect()


@pytest.fixture
def engine(store, publisher):
    return Engine(store, publisher)
