"""
Small helpers shared by the deployment steps: subprocess wrapper, polling/fallback
primitives and name validation.
"""

from aideploy.util.cmd import CMD
from aideploy.util.error_handling import PollPolicy, PollTimeout, poll_until, fallback

__all__ = ["CMD", "PollPolicy", "PollTimeout", "poll_until", "fallback"]
