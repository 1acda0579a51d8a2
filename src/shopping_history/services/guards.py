"""Single-flight guards for long-running user actions."""

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass


class OperationInProgressError(RuntimeError):
    """Raised when an action is started while the same action is running."""


@dataclass
class InFlightGuard:
    """Rejects a second start of an operation until the first one finishes."""

    name: str
    busy: bool = False

    @contextmanager
    def hold(self) -> Iterator[None]:
        """Mark the operation busy for the duration of the block."""
        if self.busy:
            raise OperationInProgressError(
                f"A {self.name} is already in progress. Please wait for it to finish."
            )
        self.busy = True
        try:
            yield
        finally:
            self.busy = False
