"""multistore: one async handle over many storage backends.

Usage:
    from multistore import MemoryDriver, create

    cache = MemoryDriver()
    replica = MemoryDriver(readable=False, awaited=False)

    store = await create([cache, replica])
    await store.put({"id": "foo", "value": "bar"})
    await store.get("foo")   # served by cache, the first readable driver
    await store.delete("foo")
    await store.stop()
"""

__version__ = "0.1.0"

# Configuration
from multistore.config import StoreSettings

# Drivers
from multistore.drivers import (
    Capability,
    Driver,
    DriverOptions,
    Filter,
    FilterGroup,
    FilterOperator,
    MemoryDriver,
    Stoppable,
    VectorQuery,
)

# Errors
from multistore.errors import (
    MissingCapabilityError,
    MultiStoreError,
    SingletonConstructionError,
    SingletonTimeoutError,
)

# Factory
from multistore.factory import (
    SingletonConfig,
    SingletonRegistry,
    create,
    release,
    singleton,
)

# Pipeline
from multistore.pipeline import (
    CompressionProcessor,
    Deserializer,
    FunctionProcessor,
    JsonProcessor,
    ModelProcessor,
    Serializer,
)

# Orchestrator
from multistore.store import DriverRegistry, MultiStore

__all__ = [
    # Version
    "__version__",
    # Orchestrator
    "MultiStore",
    "DriverRegistry",
    # Factory
    "create",
    "singleton",
    "release",
    "SingletonConfig",
    "SingletonRegistry",
    # Drivers
    "Driver",
    "Stoppable",
    "DriverOptions",
    "Capability",
    "MemoryDriver",
    "Filter",
    "FilterGroup",
    "FilterOperator",
    "VectorQuery",
    # Pipeline
    "Serializer",
    "Deserializer",
    "FunctionProcessor",
    "JsonProcessor",
    "ModelProcessor",
    "CompressionProcessor",
    # Errors
    "MultiStoreError",
    "MissingCapabilityError",
    "SingletonTimeoutError",
    "SingletonConstructionError",
    # Configuration
    "StoreSettings",
]
