"""Cache, durable store and best-effort replica behind one handle.

Run with: python examples/cache_and_replica.py
"""

import asyncio
from dataclasses import dataclass

from multistore import (
    CompressionProcessor,
    JsonProcessor,
    MemoryDriver,
    ModelProcessor,
    SingletonConfig,
    singleton,
)
from multistore.logs import configure_logging


@dataclass
class Order:
    id: str
    customer: str
    total: float


class App:
    """Stands in for whatever object owns the store (web app, worker...)."""


async def main() -> None:
    configure_logging("DEBUG")

    cache = MemoryDriver(processors=(ModelProcessor(Order),))
    durable = MemoryDriver(
        readable=False,
        processors=(ModelProcessor(Order), JsonProcessor(), CompressionProcessor()),
    )
    replica = MemoryDriver(readable=False, awaited=False, ignore_delete=True)

    app = App()
    store = await singleton(app, SingletonConfig(drivers=[cache, durable, replica]))

    order = Order(id="o-1", customer="ada", total=42.5)
    await store.put(order, {"id": order.id})
    print("cached:", await store.get("o-1"))
    print("durable:", await store.get("o-1", driver=durable))
    print("matches:", await store.find({"customer": "ada"}))

    await store.delete("o-1")
    await store.flush()
    print("after delete:", await store.get("o-1"), "| replica keeps", len(replica), "item(s)")

    await store.stop()


if __name__ == "__main__":
    asyncio.run(main())
