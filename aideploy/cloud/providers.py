import logging
import time
from typing import Callable, Iterable, Optional

import aideploy.context._globals as _globals
from aideploy.cloud.controlplane import ControlPlane
from aideploy.context.logger import Console
from aideploy.errors import ControlPlaneError, ProviderRegistrationTimeout
from aideploy.util.error_handling import PollPolicy, PollTimeout, poll_until

logger = logging.getLogger(__name__)

NOT_REGISTERED = "NotRegistered"


class ProviderRegistration:
    """
    Makes sure resource provider namespaces are Registered before anything is created.

    Registration is eventually consistent: the request returns immediately and the state
    flips later, so this waits by polling with a bounded PollPolicy. The first state query
    counts against the policy's attempts.
    """

    def __init__(
            self,
            plane: ControlPlane,
            policy: PollPolicy = PollPolicy(),
            *,
            sleep: Callable[[float], None] = time.sleep,
            console: Optional[Console] = None,
    ):
        self.plane = plane
        self.policy = policy
        self.sleep = sleep
        self.console = console or Console()

    def _state(self, namespace: str) -> str:
        try:
            return self.plane.provider_state(namespace)
        except ControlPlaneError as e:
            logger.debug(f"[ProviderRegistration] State query for {namespace} failed, assuming {NOT_REGISTERED}: {e}")
            return NOT_REGISTERED

    def _request(self, namespace: str) -> None:
        # A registration may already be in flight; the poll decides success.
        try:
            self.plane.register_provider(namespace)
        except ControlPlaneError as e:
            logger.info(f"[ProviderRegistration] Ignoring failed register request for {namespace}: {e}")

    def ensure(self, namespace: str) -> bool:
        """
        Ensure `namespace` is Registered.

        Returns:
            bool: True if a registration had to be requested, False if it was already registered.

        Raises:
            ProviderRegistrationTimeout: The state never became Registered.
        """
        self.console.info(f"Registering provider: {namespace}")

        if self._state(namespace) == _globals.REGISTERED:
            self.console.ok(f"{namespace} already registered")
            return False

        self._request(namespace)

        try:
            attempt = poll_until(
                lambda: self._state(namespace) == _globals.REGISTERED,
                self.policy,
                sleep=self.sleep,
                first_attempt=2,
                label=f"register {namespace}",
            )
        except PollTimeout as e:
            raise ProviderRegistrationTimeout(namespace, e.attempts) from e

        logger.info(f"[ProviderRegistration] {namespace} registered after {attempt} checks")
        self.console.ok(f"{namespace} registered successfully")
        return True

    def ensure_all(self, namespaces: Iterable[str]) -> None:
        for namespace in namespaces:
            self.ensure(namespace)
