"""Ordered driver registry with capability selection.

Registration order is the only ordering contract: it drives every fan-out
and every capability lookup.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any

from multistore.drivers.models import Capability, resolve_options
from multistore.logs import get_logger

logger = get_logger(__name__)


class DriverRegistry:
    """Ordered collection of drivers, matched by identity.

    The same driver may be added twice; remove() drops the first occurrence.
    Mutating the registry while a fan-out is in flight is the caller's
    responsibility.
    """

    def __init__(self) -> None:
        self._drivers: list[Any] = []

    def __len__(self) -> int:
        return len(self._drivers)

    def __iter__(self) -> Iterator[Any]:
        return iter(list(self._drivers))

    def __contains__(self, driver: object) -> bool:
        return any(registered is driver for registered in self._drivers)

    def add(self, driver: Any) -> bool:
        """Append a driver. Always succeeds."""
        self._drivers.append(driver)
        logger.debug("driver_registered", driver=repr(driver), position=len(self._drivers) - 1)
        return True

    def remove(self, driver: Any) -> bool:
        """Remove the first registration of this exact driver object.

        Returns:
            True if the driver was registered, False otherwise.
        """
        for index, registered in enumerate(self._drivers):
            if registered is driver:
                del self._drivers[index]
                logger.debug("driver_removed", driver=repr(driver), position=index)
                return True
        return False

    def select(self, capability: Capability) -> Any | None:
        """Get the first driver, in registration order, declaring a capability."""
        for driver in self._drivers:
            if resolve_options(driver).has(capability):
                return driver
        return None
