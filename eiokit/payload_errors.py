"""Errors raised by the payload layer."""

from __future__ import annotations

INVALID_PAYLOAD = "invalid payload"


class PayloadError(Exception):
    """Base of payload errors; knows whether the operation may be retried."""

    def temporary(self) -> bool:
        return False


class OpError(PayloadError):
    """An error tied to the operation that raised it."""

    def __init__(self, op: str, err: BaseException) -> None:
        super().__init__(op, err)
        self.op = op
        self.err = err

    def __str__(self) -> str:
        return f"{self.op}: {self.err}"

    def temporary(self) -> bool:
        """True if the wrapped error can be retried."""
        return isinstance(self.err, PayloadError) and self.err.temporary()


class RetryError(PayloadError):
    """An error after which the operation may be retried."""

    def temporary(self) -> bool:
        return True


ERR_PAUSED = RetryError("paused")
ERR_TIMEOUT = TimeoutError("timeout")
ERR_OVERLAP = RuntimeError("overlap")