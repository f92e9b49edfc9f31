"""Exceptions raised by the orchestration core.

Driver and processor failures are not wrapped: the original exception
propagates with a note naming the driver and operation (see
``annotate_failure``).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from multistore.drivers.models import Capability


class MultiStoreError(Exception):
    """Base class for errors raised by multistore itself."""


class MissingCapabilityError(MultiStoreError, LookupError):
    """No registered driver exposes the capability an operation needs."""

    def __init__(self, capability: Capability, message: str) -> None:
        super().__init__(message)
        self.capability = capability


class SingletonTimeoutError(MultiStoreError, TimeoutError):
    """Waiting for another caller to finish singleton construction timed out."""

    def __init__(self, operation: str, timeout_ms: int) -> None:
        super().__init__(f"{operation}: timed out after {timeout_ms}ms")
        self.operation = operation
        self.timeout_ms = timeout_ms


class SingletonConstructionError(MultiStoreError):
    """The caller constructing a singleton failed while others were waiting."""


def annotate_failure(exc: BaseException, driver: object, operation: str) -> None:
    """Attach a note identifying the driver and operation that failed."""
    exc.add_note(f"multistore: {operation} failed on driver {driver!r}")
