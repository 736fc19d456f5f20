"""Bounded retry with exponential backoff for transient MCP failures."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, TypeVar

from mcpforge.errors import McpError

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class RetryPolicy:
    """
    Retry settings for one server.

    Values below their minimum are coerced up: ``attempts`` to 1, the
    backoff values to 0. A ``max_backoff_ms`` of 0 disables the cap, so the
    delay stays at ``backoff_ms`` between every attempt.
    """

    attempts: int = 1
    backoff_ms: int = 100
    max_backoff_ms: int = 1000
    sleep: Callable[[float], None] = field(default=time.sleep, repr=False, compare=False)

    def __post_init__(self) -> None:
        self.attempts = max(1, int(self.attempts))
        self.backoff_ms = max(0, int(self.backoff_ms))
        self.max_backoff_ms = max(0, int(self.max_backoff_ms))

    def call(self, fn: Callable[[], T]) -> T:
        """Run ``fn``, retrying transient failures until attempts run out."""
        attempt = 0
        delay_ms = self.backoff_ms

        while True:
            attempt += 1
            try:
                return fn()
            except McpError as exc:
                if not exc.transient or attempt >= self.attempts:
                    raise
                logger.warning(
                    "Transient MCP failure (attempt %d/%d): %s", attempt, self.attempts, exc
                )

            if delay_ms > 0:
                self.sleep(delay_ms / 1000)

            if self.max_backoff_ms > 0:
                delay_ms = min(delay_ms * 2, self.max_backoff_ms)
