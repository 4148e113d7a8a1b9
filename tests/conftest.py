from typing import Dict, List, Optional

import pytest

from aideploy.cloud.controlplane import AzureSession
from aideploy.context.logger import Console, Logger
from aideploy.errors import ControlPlaneError

FAKE_KEY = "abc123"
FAKE_ENDPOINT = "https://example.cognitiveservices.azure.com/"
FAKE_SUBSCRIPTION = "00000000-0000-0000-0000-000000000000"


class FakeControlPlane:
    """
    In-memory ControlPlane. Every call is appended to `calls` as (method, args).

    Failures are scripted through `fail`: method name -> number of calls that should
    raise ControlPlaneError before succeeding (use a large number to always fail).
    """

    def __init__(
            self,
            session: Optional[AzureSession] = AzureSession(FAKE_SUBSCRIPTION, "tenant", "dev@example.com"),
            states: Optional[Dict[str, List[str]]] = None,
            fail: Optional[Dict[str, int]] = None,
            key: str = FAKE_KEY,
            endpoint: str = FAKE_ENDPOINT,
    ):
        self.session = session
        self.states = {ns: list(seq) for ns, seq in (states or {}).items()}
        self.fail = dict(fail or {})
        self.key = key
        self.endpoint = endpoint
        self.calls: List[tuple] = []
        self.secrets: Dict[str, Dict[str, str]] = {}

    def _record(self, method: str, *args):
        self.calls.append((method, args))
        if self.fail.get(method, 0) > 0:
            self.fail[method] -= 1
            raise ControlPlaneError(f"{method} failed")

    def called(self, method: str) -> List[tuple]:
        return [args for name, args in self.calls if name == method]

    def account_show(self):
        self._record("account_show")
        return self.session

    def provider_state(self, namespace):
        self._record("provider_state", namespace)
        seq = self.states.get(namespace, ["Registered"])
        # The last scripted state repeats forever.
        return seq.pop(0) if len(seq) > 1 else seq[0]

    def register_provider(self, namespace):
        self._record("register_provider", namespace)

    def create_resource_group(self, name, location, tags):
        self._record("create_resource_group", name, location, tags)

    def create_key_vault(self, name, resource_group, location, sku, enable_rbac_authorization, tags):
        self._record("create_key_vault", name, resource_group, location, sku, enable_rbac_authorization, tags)

    def create_ai_account(self, name, resource_group, location, kind, sku, tags):
        self._record("create_ai_account", name, resource_group, location, kind, sku, tags)

    def ai_account_key(self, name, resource_group):
        self._record("ai_account_key", name, resource_group)
        return self.key

    def ai_account_endpoint(self, name, resource_group):
        self._record("ai_account_endpoint", name, resource_group)
        return self.endpoint

    def set_secret(self, vault_name, name, value):
        self._record("set_secret", vault_name, name)
        self.secrets.setdefault(vault_name, {})[name] = value


class FakeSleep:
    """Records requested sleeps instead of sleeping."""

    def __init__(self):
        self.calls: List[float] = []

    def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


@pytest.fixture
def plane():
    return FakeControlPlane()


@pytest.fixture
def fake_sleep():
    return FakeSleep()


@pytest.fixture
def console():
    return Console(color=False)


@pytest.fixture
def fixed_bytes():
    """random_bytes stand-in: a1b2c3 -> suffix 'abc'."""
    return lambda n: bytes.fromhex("a1b2c3")[:n]


@pytest.fixture(autouse=True)
def reset_logger():
    Logger.reset()
    yield
    Logger.reset()


@pytest.fixture
def make_plane():
    """Factory for scripted FakeControlPlane instances."""
    return FakeControlPlane
