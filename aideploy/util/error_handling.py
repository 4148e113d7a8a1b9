import logging
import time
from dataclasses import dataclass
from typing import Callable, Any, Optional, Tuple, Type

logger = logging.getLogger(__name__)


class PollTimeout(RuntimeError):
    """Raised by poll_until when the check never succeeds."""

    def __init__(self, label: str, attempts: int):
        self.label = label
        self.attempts = attempts
        super().__init__(f"[{label}] Condition not met after {attempts} attempts")


@dataclass(frozen=True)
class PollPolicy:
    """
    Bounded wait-for-eventual-consistency policy.

    Args:
        max_attempts (int): Total number of checks, including the first one.
        interval (float): Seconds to wait before the second check.
        backoff (float): Multiplier applied to the interval after every miss. 1.0 keeps it fixed.
        max_interval (float, optional): Upper bound for a single wait.
    """
    max_attempts: int = 50
    interval: float = 6.0
    backoff: float = 1.0
    max_interval: Optional[float] = None

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ValueError("PollPolicy.max_attempts must be at least 1")
        if self.interval < 0:
            raise ValueError("PollPolicy.interval must not be negative")
        if self.backoff < 1.0:
            raise ValueError("PollPolicy.backoff must be >= 1.0")

    def delay(self, miss: int) -> float:
        """Seconds to sleep after the `miss`-th unsuccessful check (1-based)."""
        wait = self.interval * (self.backoff ** (miss - 1))
        if self.max_interval is not None:
            wait = min(wait, self.max_interval)
        return wait


class ErrorHandling:
    @staticmethod
    def poll_until(
            check: Callable[[], bool],
            policy: PollPolicy,
            *,
            sleep: Callable[[float], None] = time.sleep,
            first_attempt: int = 1,
            label: str = "poll",
    ) -> int:
        """
        Calls `check` until it returns True or the policy's attempts are used up.

        Sleeps between checks only, never after the last one. `first_attempt` lets a
        caller that already performed some checks itself count them against the same budget.

        Returns:
            int: The attempt number on which `check` succeeded.

        Raises:
            PollTimeout: If every remaining attempt returned False.
        """
        if first_attempt < 1:
            raise ValueError(f"[{label}] first_attempt must be >= 1")

        for attempt in range(first_attempt, policy.max_attempts + 1):
            if attempt > 1:
                wait = policy.delay(attempt - 1)
                logger.debug(f"[{label}] Waiting {wait:.1f}s before attempt {attempt}/{policy.max_attempts}")
                sleep(wait)
            if check():
                logger.debug(f"[{label}] Condition met on attempt {attempt}")
                return attempt

        raise PollTimeout(label, policy.max_attempts)

    @staticmethod
    def fallback(
            primary: Callable[[], Any],
            alternate: Callable[[], Any],
            *,
            handled: Tuple[Type[BaseException], ...] = (Exception,),
            label: str = "operation",
    ) -> Tuple[Any, bool]:
        """
        Runs `primary`; if it raises one of `handled`, runs `alternate` exactly once.

        The alternate's own exception propagates untouched, so there is never a third attempt.

        Returns:
            tuple: (result, used_alternate)
        """
        if not callable(primary) or not callable(alternate):
            raise TypeError(f"[{label}] primary and alternate must be callable")

        try:
            return primary(), False
        except handled as e:
            logger.warning(f"[{label}] Primary attempt failed: {e}")

        logger.info(f"[{label}] Trying alternate")
        return alternate(), True


poll_until = ErrorHandling.poll_until
fallback = ErrorHandling.fallback
