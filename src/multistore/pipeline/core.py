"""Transform pipeline: serializers forward, deserializers in reverse.

Usage:
    encoded = await serialize(obj, [compress, encrypt], options)
    # compress.serialize runs first, then encrypt.serialize

    decoded = await deserialize(encoded, [compress, encrypt], options)
    # encrypt.deserialize runs first, then compress.deserialize
"""

from __future__ import annotations

import inspect
from collections.abc import Callable, Mapping, Sequence
from typing import Any

from multistore.pipeline.protocol import Deserializer, Processor, Serializer


def _serialize_step(processor: Processor) -> Callable[..., Any] | None:
    if isinstance(processor, Serializer) and callable(processor.serialize):
        return processor.serialize
    return None


def _deserialize_step(processor: Processor) -> Callable[..., Any] | None:
    if isinstance(processor, Deserializer) and callable(processor.deserialize):
        return processor.deserialize
    return None


async def _resolve(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


async def serialize(
    value: Any,
    processors: Sequence[Processor],
    options: Mapping[str, Any] | None = None,
) -> Any:
    """Apply each processor's serializer in chain order.

    Processors without a ``serialize`` step pass the value through.
    """
    for processor in processors:
        step = _serialize_step(processor)
        if step is None:
            continue
        value = await _resolve(step(value, options))
    return value


async def deserialize(
    value: Any,
    processors: Sequence[Processor],
    options: Mapping[str, Any] | None = None,
) -> Any:
    """Apply each processor's deserializer in reverse chain order.

    A falsy value (typically None for "not found") stops the chain and is
    returned unchanged, including when the driver itself returned it.
    """
    for processor in reversed(processors):
        if not value:
            return value
        step = _deserialize_step(processor)
        if step is None:
            continue
        value = await _resolve(step(value, options))
    return value


async def deserialize_result(
    result: Any,
    processors: Sequence[Processor],
    options: Mapping[str, Any] | None = None,
) -> Any:
    """Deserialize a search result, keeping its plural or singular shape.

    Lists and tuples are decoded element by element and returned as a list.
    Anything else is treated as a single match.
    """
    if isinstance(result, list | tuple):
        return [await deserialize(item, processors, options) for item in result]
    return await deserialize(result, processors, options)
