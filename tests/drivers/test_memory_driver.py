"""Tests for MemoryDriver.

Focus: id resolution (error-prone once processors change the value's shape),
copy isolation, search helpers.
"""

import pytest

from multistore import MemoryDriver, MultiStore
from multistore.drivers.models import Capability
from multistore.pipeline.processors import JsonProcessor


@pytest.fixture
def driver() -> MemoryDriver:
    return MemoryDriver()


@pytest.mark.asyncio
async def test_put_get_delete(driver):
    await driver.init()

    await driver.put({"id": "foo", "value": "bar"})
    assert await driver.get("foo") == {"id": "foo", "value": "bar"}

    await driver.delete("foo")
    assert await driver.get("foo") is None

    # Deleting twice is harmless
    await driver.delete("foo")


@pytest.mark.asyncio
async def test_values_are_copied(driver):
    """Mutating inputs or outputs must not change stored state."""
    await driver.init()
    original = {"id": "foo", "tags": ["a"]}

    await driver.put(original)
    original["tags"].append("b")
    fetched = await driver.get("foo")
    fetched["tags"].append("c")

    assert await driver.get("foo") == {"id": "foo", "tags": ["a"]}


@pytest.mark.asyncio
async def test_custom_id_field():
    driver = MemoryDriver(id_field="key")
    await driver.init()

    await driver.put({"key": 7, "value": "x"})

    assert await driver.get(7) == {"key": 7, "value": "x"}


@pytest.mark.asyncio
async def test_id_from_options_when_value_is_opaque(driver):
    """Serialized values (text, bytes) need the id passed in options."""
    await driver.init()

    await driver.put('{"id": "foo"}', {"id": "foo"})
    assert await driver.get("foo") == '{"id": "foo"}'

    with pytest.raises(KeyError, match="Cannot determine id"):
        await driver.put("opaque")


@pytest.mark.asyncio
async def test_find_matches_all_criteria(driver):
    await driver.init()
    await driver.put({"id": "1", "kind": "doc", "lang": "en"})
    await driver.put({"id": "2", "kind": "doc", "lang": "de"})
    await driver.put({"id": "3", "kind": "image"})

    matches = await driver.options.find({"kind": "doc", "lang": "de"}, None, driver)

    assert matches == [{"id": "2", "kind": "doc", "lang": "de"}]


@pytest.mark.asyncio
async def test_find_by_predicate(driver):
    await driver.init()
    for n in range(5):
        await driver.put({"id": n, "n": n})

    matches = await driver.options.find_by(lambda value: value["n"] % 2 == 0, None, driver)

    assert [m["id"] for m in matches] == [0, 2, 4]


def test_option_defaults_and_overrides():
    default = MemoryDriver()
    index_less = MemoryDriver(searchable=False, readable=False, ignore_delete=True)

    assert default.options.has(Capability.READABLE)
    assert default.options.has(Capability.FIND)
    assert not index_less.options.has(Capability.READABLE)
    assert not index_less.options.has(Capability.FIND_BY)
    assert index_less.options.ignore_delete


@pytest.mark.asyncio
async def test_stop_clears_store(driver):
    await driver.init()
    await driver.put({"id": "foo"})

    await driver.stop()

    assert len(driver) == 0


@pytest.mark.asyncio
async def test_json_chain_through_store():
    """Processors turn the value into text; the id travels in options."""
    store = MultiStore()
    await store.init([MemoryDriver(processors=(JsonProcessor(),))])

    await store.put({"id": "foo", "n": 1}, {"id": "foo"})

    assert await store.get("foo") == {"id": "foo", "n": 1}
