"""Tests for the transform pipeline.

Critical Invariants:
- serialize applies p1..pn, deserialize applies pn..p1 (exact reverse)
- Missing steps are skipped, not errors
- A falsy intermediate value stops deserialization and is returned as-is
- Search results keep their plural/singular shape
"""

import pytest

from multistore.pipeline import deserialize, deserialize_result, serialize
from multistore.pipeline.processors import FunctionProcessor


@pytest.mark.asyncio
async def test_serialize_runs_forward_and_deserialize_runs_reverse(make_tagger, call_log):
    """CRITICAL: Asymmetric processors only round-trip in exact reverse order.

    Why: Reversal is easy to get wrong and silently corrupts data.
    """
    processors = [make_tagger("outer"), make_tagger("middle"), make_tagger("inner")]

    encoded = await serialize("v", processors)
    assert encoded == "v|outer|middle|inner"

    decoded = await deserialize(encoded, processors)
    assert decoded == "v"

    assert call_log == [
        ("outer", "serialize"),
        ("middle", "serialize"),
        ("inner", "serialize"),
        ("inner", "deserialize"),
        ("middle", "deserialize"),
        ("outer", "deserialize"),
    ]


@pytest.mark.asyncio
async def test_missing_steps_pass_value_through():
    class SerializeOnly:
        def serialize(self, value, options):
            return value + 1

    class DeserializeOnly:
        def deserialize(self, value, options):
            return value * 10

    processors = [SerializeOnly(), object(), DeserializeOnly(), FunctionProcessor()]

    assert await serialize(1, processors) == 2
    assert await deserialize(2, processors) == 20


@pytest.mark.asyncio
async def test_async_steps_are_awaited():
    async def double(value, options):
        return value * 2

    processors = [FunctionProcessor(serialize=double, deserialize=double)]

    assert await serialize(3, processors) == 6
    assert await deserialize(3, processors) == 6


@pytest.mark.asyncio
async def test_options_reach_every_step():
    seen = []

    def record(value, options):
        seen.append(options)
        return value

    processors = [FunctionProcessor(serialize=record, deserialize=record)] * 2
    options = {"tenant": "acme"}

    await serialize("x", processors, options)
    await deserialize("x", processors, options)

    assert seen == [options] * 4


@pytest.mark.asyncio
async def test_falsy_intermediate_stops_deserialization(call_log):
    """If an intermediate result is falsy, no later deserializer runs.

    Why: Falsy values model "not found" and must pass through cleanly.
    """

    def gone(value, options):
        call_log.append(("inner", "deserialize"))
        return None

    def must_not_run(value, options):
        call_log.append(("outer", "deserialize"))
        raise AssertionError("outer deserializer ran on a falsy value")

    processors = [
        FunctionProcessor(deserialize=must_not_run),
        FunctionProcessor(deserialize=gone),
    ]

    assert await deserialize("stored", processors) is None
    assert call_log == [("inner", "deserialize")]


@pytest.mark.asyncio
@pytest.mark.parametrize("falsy", [None, "", 0, b""])
async def test_falsy_raw_value_is_returned_unchanged(falsy):
    def explode(value, options):
        raise AssertionError("deserializer ran on a falsy value")

    assert await deserialize(falsy, [FunctionProcessor(deserialize=explode)]) == falsy


@pytest.mark.asyncio
async def test_deserialize_result_keeps_shape(make_tagger):
    processors = [make_tagger("t")]

    assert await deserialize_result("one|t", processors) == "one"
    assert await deserialize_result(["a|t", "b|t"], processors) == ["a", "b"]
    assert await deserialize_result(("a|t",), processors) == ["a"]
    assert await deserialize_result([], processors) == []


@pytest.mark.asyncio
async def test_deserialize_result_short_circuits_per_item(make_tagger):
    """Each match is independent: a missing one does not affect the rest."""
    processors = [make_tagger("t")]

    assert await deserialize_result(["a|t", None, "b|t"], processors) == ["a", None, "b"]
