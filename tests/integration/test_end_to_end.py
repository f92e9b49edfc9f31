"""End-to-end workflows over the public API."""

import pytest
from pydantic import BaseModel

from multistore import (
    FunctionProcessor,
    JsonProcessor,
    MemoryDriver,
    ModelProcessor,
    SingletonConfig,
    SingletonRegistry,
    create,
)


class Profile(BaseModel):
    id: str
    name: str


@pytest.mark.asyncio
async def test_put_get_delete_single_driver():
    """put then get returns the object; after delete, get finds nothing."""
    store = await create([MemoryDriver()])
    test_object = {"id": "foo", "value": "bar"}

    await store.put(test_object)
    assert await store.get("foo") == test_object

    await store.delete("foo")
    assert not await store.get("foo")


@pytest.mark.asyncio
async def test_find_skips_drivers_without_find():
    """find goes to the driver that has a search function, not the first one."""
    calls = []

    async def search(criteria, options, driver):
        calls.append(criteria)
        return [{"id": "hit"}]

    encoder = MemoryDriver(
        searchable=False,
        readable=False,
        processors=(FunctionProcessor(serialize=lambda value, _: repr(value)),),
    )
    searchable = MemoryDriver(find=search)
    store = await create([encoder, searchable])

    assert await store.find({"q": "hit"}) == [{"id": "hit"}]
    assert calls == [{"q": "hit"}]


@pytest.mark.asyncio
async def test_cache_in_front_of_durable_store():
    """Typed models are stored as JSON in one driver and as dicts in another."""
    cache = MemoryDriver(processors=(ModelProcessor(Profile),))
    durable = MemoryDriver(readable=False, processors=(ModelProcessor(Profile), JsonProcessor()))
    store = await create([cache, durable])

    await store.put(Profile(id="u1", name="Ada"), {"id": "u1"})

    assert await store.get("u1") == Profile(id="u1", name="Ada")
    assert await store.get("u1", driver=durable) == Profile(id="u1", name="Ada")
    assert (await durable.get("u1")).startswith("{")

    await store.delete("u1")
    assert await store.get("u1") is None
    assert await durable.get("u1") is None
    await store.stop()


@pytest.mark.asyncio
async def test_singleton_store_shared_by_request_handlers():
    registry = SingletonRegistry()

    class App:
        pass

    app = App()
    config = SingletonConfig(drivers=[MemoryDriver()])

    writer = await registry.get_or_create(app, config)
    await writer.put({"id": "session", "user": "ada"})

    reader = await registry.get_or_create(app, config)
    assert reader is writer
    assert await reader.get("session") == {"id": "session", "user": "ada"}
