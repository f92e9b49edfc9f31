"""Driver protocols, options, and reference drivers.

Usage:
    from multistore.drivers import DriverOptions, MemoryDriver

    # Implementations with optional dependencies
    from multistore.drivers.chroma import ChromaDriver  # pip install multistore[chroma]
"""

from multistore.drivers.memory import MemoryDriver
from multistore.drivers.models import (
    Capability,
    DriverOptions,
    Filter,
    FilterGroup,
    FilterOperator,
    SearchFunction,
    VectorQuery,
    resolve_options,
)
from multistore.drivers.protocol import Driver, Stoppable

__all__ = [
    # Protocols
    "Driver",
    "Stoppable",
    # Options
    "Capability",
    "DriverOptions",
    "SearchFunction",
    "resolve_options",
    # Search types
    "Filter",
    "FilterGroup",
    "FilterOperator",
    "VectorQuery",
    # Implementations
    "MemoryDriver",
]
