# tenant.py
import logging

from aideploy.cloud.controlplane import AzureSession, ControlPlane
from aideploy.errors import ControlPlaneError, NotAuthenticatedError

logger = logging.getLogger(__name__)

LOGIN_HINT = "Not logged into Azure. Run 'az login' first."


class AzureAccount:
    """
    Confirms the operator is signed in before anything is created.
    """

    @staticmethod
    def require_session(plane: ControlPlane) -> AzureSession:
        """
        Return the active session.

        A failed session query counts as "not signed in".

        Raises:
            NotAuthenticatedError: Always fatal; never retried.
        """
        try:
            session = plane.account_show()
        except ControlPlaneError as e:
            logger.warning(f"[AzureAccount] Session query failed: {e}")
            raise NotAuthenticatedError(f"{LOGIN_HINT} ({e})") from e

        if session is None or not session.subscription_id:
            raise NotAuthenticatedError(LOGIN_HINT)

        logger.info(f"[AzureAccount] Signed in as {session.user or '<unknown>'} (tenant={session.tenant_id})")
        return session
