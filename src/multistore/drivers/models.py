"""Driver option models and capability flags.

Usage:
    options = DriverOptions(readable=True, processors=(JsonProcessor(),))

    # Mapping form, as drivers configured from plain dicts provide it
    options = DriverOptions.from_mapping({"readable": True, "await": False})
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Mapping, Sequence
from dataclasses import dataclass, field, fields
from enum import Enum
from typing import TYPE_CHECKING, Any, Literal

if TYPE_CHECKING:
    from multistore.pipeline.protocol import Processor


SearchFunction = Callable[[Any, Mapping[str, Any] | None, Any], Awaitable[Any] | Any]
"""Signature: (criteria, options, driver) -> single match or sequence of matches"""


class Capability(Enum):
    """Optional features a driver may declare through its options."""

    READABLE = "readable"
    """Eligible as the source for get()."""

    FIND = "find"
    """Provides a find() search function."""

    FIND_BY = "find_by"
    """Provides a find_by() search function."""


@dataclass(frozen=True, slots=True)
class DriverOptions:
    """Options the orchestrator reads from a driver.

    Attributes:
        readable: Driver may serve get().
        ignore_delete: Driver is skipped by delete() fan-out.
        awaited: put() waits for this driver. False makes writes detached:
            started on their own task, with failures logged but never raised.
            Spelled ``await`` in mapping form.
        processors: Transform chain, outermost first.
        find: Search function backing find().
        find_by: Search function backing find_by().
    """

    readable: bool = False
    ignore_delete: bool = False
    awaited: bool = True
    processors: tuple[Processor, ...] = ()
    find: SearchFunction | None = None
    find_by: SearchFunction | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.processors, tuple):
            object.__setattr__(self, "processors", tuple(self.processors))

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> DriverOptions:
        """Build options from a mapping, ignoring keys the core does not use.

        The ``await`` key is accepted as an alias for ``awaited``.
        """
        known = {f.name for f in fields(cls)}
        values = {key: value for key, value in raw.items() if key in known}
        if "await" in raw and "awaited" not in raw:
            values["awaited"] = raw["await"]
        processors: Sequence[Processor] = values.pop("processors", None) or ()
        return cls(processors=tuple(processors), **values)

    def has(self, capability: Capability) -> bool:
        """Check whether these options declare a capability."""
        if capability is Capability.READABLE:
            return self.readable is True
        if capability is Capability.FIND:
            return callable(self.find)
        if capability is Capability.FIND_BY:
            return callable(self.find_by)
        raise ValueError(f"Unknown capability: {capability}")

    def search_function(self, capability: Capability) -> SearchFunction | None:
        """Get the search function backing FIND or FIND_BY."""
        if capability is Capability.FIND:
            return self.find
        if capability is Capability.FIND_BY:
            return self.find_by
        raise ValueError(f"{capability} is not a search capability")


def resolve_options(driver: Any) -> DriverOptions:
    """Read a driver's options, coercing mapping form to DriverOptions.

    Drivers without an ``options`` attribute get the defaults.
    """
    options = getattr(driver, "options", None)
    if options is None:
        return DriverOptions()
    if isinstance(options, DriverOptions):
        return options
    if isinstance(options, Mapping):
        return DriverOptions.from_mapping(options)
    raise TypeError(
        f"Driver {type(driver).__name__} options must be DriverOptions or a mapping, "
        f"got {type(options).__name__}"
    )


class FilterOperator(Enum):
    """Comparison applied by a search-index driver to one stored field."""

    EQ = "eq"
    NE = "ne"
    GT = "gt"
    GTE = "gte"
    LT = "lt"
    LTE = "lte"
    IN = "in"
    NIN = "nin"


@dataclass(slots=True)
class Filter:
    """``field <operator> value`` criterion passed to find()."""

    field: str
    operator: FilterOperator
    value: Any


@dataclass(slots=True)
class FilterGroup:
    """Criteria joined by ``"and"`` or ``"or"``; groups may nest."""

    filters: list[Filter | FilterGroup] = field(default_factory=list)
    operator: Literal["and", "or"] = "and"


@dataclass(slots=True)
class VectorQuery:
    """Nearest-neighbour query for search-index drivers.

    Attributes:
        embedding: Query vector.
        limit: Maximum number of matches.
        filters: Optional metadata filters applied before ranking.
    """

    embedding: list[float]
    limit: int = 10
    filters: Filter | FilterGroup | None = None
