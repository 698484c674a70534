"""Wait for a freshly created instance to be assigned a usable address."""

from __future__ import annotations

import enum
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from xnode_deployer.errors import ReadinessTimeout

logger = logging.getLogger(__name__)

PLACEHOLDER_ADDRESS = "0.0.0.0"


class ReadinessState(enum.Enum):
    PROVISIONING = "provisioning"
    READY = "ready"


@dataclass
class Ready:
    """Outcome of a successful wait."""

    address: str
    instance: dict = field(default_factory=dict)
    polls: int = 0


def is_usable_address(value: Any) -> bool:
    """True for a non-empty address string that is not the placeholder."""
    return isinstance(value, str) and value != "" and value != PLACEHOLDER_ADDRESS


class ReadinessPoller:
    """Re-read an instance at a fixed interval until its address is assigned.

    Providers report ``0.0.0.0`` (or nothing) while an address is still being
    allocated. The loop is bounded by ``max_attempts`` refreshes and, when
    given, a wall-clock ``timeout`` in seconds; hitting either raises
    ``ReadinessTimeout``.
    """

    def __init__(
        self,
        interval: float = 1.0,
        max_attempts: Optional[int] = 600,
        timeout: Optional[float] = None,
        address_key: str = "floating_ip",
    ):
        if max_attempts is None and timeout is None:
            raise ValueError("ReadinessPoller needs max_attempts or timeout")
        if max_attempts is not None and max_attempts < 0:
            raise ValueError(f"max_attempts must be >= 0, got {max_attempts}")
        self.interval = interval
        self.max_attempts = max_attempts
        self.timeout = timeout
        self.address_key = address_key

    def state_of(self, instance: dict) -> ReadinessState:
        if is_usable_address(instance.get(self.address_key)):
            return ReadinessState.READY
        return ReadinessState.PROVISIONING

    def wait(self, instance: dict, refresh: Callable[[], Any]) -> Ready:
        """Poll until ``instance[address_key]`` holds a usable address.

        ``refresh`` re-reads the instance; whatever object it returns is
        merged over the tracked instance. Non-object results merge nothing.
        Errors raised by ``refresh`` propagate unchanged.
        """
        tracked = dict(instance)

        def step() -> None:
            refreshed = refresh()
            if isinstance(refreshed, dict):
                tracked.update(refreshed)

        polls = self._loop(tracked, step, tracked)
        return Ready(address=tracked.get(self.address_key), instance=tracked, polls=polls)

    def wait_for(self, probe: Callable[[], Optional[str]], initial: Optional[str] = None) -> Ready:
        """Poll ``probe`` until it returns a usable address."""
        tracked = {self.address_key: initial}

        def step() -> None:
            tracked[self.address_key] = probe()

        polls = self._loop(tracked, step, None)
        return Ready(address=tracked[self.address_key], polls=polls)

    def _loop(self, tracked: dict, step: Callable[[], None], snapshot: Any) -> int:
        start = time.monotonic()
        polls = 0
        while self.state_of(tracked) is ReadinessState.PROVISIONING:
            elapsed = time.monotonic() - start
            if self._exhausted(polls, elapsed):
                logger.warning(
                    "Gave up waiting for an address after %d polls (%.1fs)", polls, elapsed
                )
                raise ReadinessTimeout(polls, elapsed, snapshot)
            logger.debug("No address yet (poll %d), sleeping %.1fs", polls, self.interval)
            time.sleep(self.interval)
            step()
            polls += 1

        logger.info("Address %s assigned after %d polls", tracked.get(self.address_key), polls)
        return polls

    def _exhausted(self, polls: int, elapsed: float) -> bool:
        if self.max_attempts is not None and polls >= self.max_attempts:
            return True
        return self.timeout is not None and elapsed >= self.timeout
