"""Wall-clock deadline shared by the steps of one operation."""

from __future__ import annotations

import time


class DeadlineExceeded(TimeoutError):
    """Raised when an operation runs past its deadline."""

    def __init__(self, step: str, seconds: float):
        self.step = step
        self.seconds = seconds
        super().__init__(f"{step}: deadline of {seconds:g}s exceeded")


class Deadline:
    """Absolute deadline measured from construction with ``time.monotonic``."""

    def __init__(self, seconds: float):
        """A zero or negative ``seconds`` gives a deadline that is already expired."""
        self.seconds = seconds
        self._expires_at = time.monotonic() + seconds

    def remaining(self) -> float:
        return max(0.0, self._expires_at - time.monotonic())

    @property
    def expired(self) -> bool:
        return self.remaining() <= 0

    def check(self, step: str) -> None:
        if self.expired:
            raise DeadlineExceeded(step, self.seconds)

    def __repr__(self) -> str:
        return f"Deadline(seconds={self.seconds:g}, remaining={self.remaining():.3f})"


__all__ = ["Deadline", "DeadlineExceeded"]
