"""Reference processors.

Usage:
    from multistore.pipeline.processors import (
        CompressionProcessor,
        JsonProcessor,
        ModelProcessor,
    )

    # Model -> dict -> JSON text -> zlib bytes on write, reversed on read
    processors = (ModelProcessor(Document), JsonProcessor(), CompressionProcessor())
"""

from __future__ import annotations

import dataclasses
import json
import zlib
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


def _is_pydantic_model(cls: type[Any]) -> bool:
    """Check if class is a Pydantic model."""
    return isinstance(cls, type) and issubclass(cls, BaseModel)


def _is_dataclass(cls: type) -> bool:
    """Check if class is a dataclass."""
    return dataclasses.is_dataclass(cls) and isinstance(cls, type)


@dataclass(frozen=True, slots=True)
class FunctionProcessor:
    """Processor assembled from plain callables.

    Either step may be None, in which case the pipeline skips it.

    Usage:
        upper = FunctionProcessor(serialize=lambda v, _: v.upper())
    """

    serialize: Callable[[Any, Mapping[str, Any] | None], Any] | None = None
    deserialize: Callable[[Any, Mapping[str, Any] | None], Any] | None = None


class JsonProcessor:
    """Encode values as JSON text on write and parse them on read."""

    def __init__(self, *, sort_keys: bool = False) -> None:
        self._sort_keys = sort_keys

    def serialize(self, value: Any, options: Mapping[str, Any] | None = None) -> str:
        return json.dumps(value, sort_keys=self._sort_keys)

    def deserialize(self, value: str | bytes, options: Mapping[str, Any] | None = None) -> Any:
        return json.loads(value)


class ModelProcessor(Generic[T]):
    """Map between a Pydantic model or dataclass and a plain dict.

    Values that are not instances of the data type pass through on write, so
    callers may mix model instances and raw dicts.

    Args:
        data_type: Model class used to rebuild values on read.
    """

    def __init__(self, data_type: type[T]) -> None:
        if not (_is_pydantic_model(data_type) or _is_dataclass(data_type)):
            raise TypeError(f"{data_type.__name__} is neither a Pydantic model nor a dataclass")
        self._data_type = data_type

    @property
    def data_type(self) -> type[T]:
        """Get the model class being mapped."""
        return self._data_type

    def serialize(self, value: Any, options: Mapping[str, Any] | None = None) -> Any:
        if not isinstance(value, self._data_type):
            return value
        if isinstance(value, BaseModel):
            return value.model_dump(mode="json")
        return dataclasses.asdict(value)  # type: ignore[call-overload]

    def deserialize(self, value: Mapping[str, Any], options: Mapping[str, Any] | None = None) -> T:
        if _is_pydantic_model(self._data_type):
            return self._data_type.model_validate(value)  # type: ignore[attr-defined,no-any-return]
        return self._data_type(**value)


class CompressionProcessor:
    """zlib-compress values on write and decompress them on read.

    Args:
        level: zlib compression level (0-9, -1 for the library default).
        encoding: Text encoding applied around the compressed bytes. When set,
            str values are encoded before compression and the decompressed
            bytes are decoded back to str. None keeps everything as bytes.
    """

    def __init__(self, level: int = -1, encoding: str | None = "utf-8") -> None:
        if not -1 <= level <= 9:
            raise ValueError(f"Compression level must be between -1 and 9, got {level}")
        self._level = level
        self._encoding = encoding

    def serialize(self, value: str | bytes, options: Mapping[str, Any] | None = None) -> bytes:
        if isinstance(value, str):
            if self._encoding is None:
                raise TypeError("CompressionProcessor without encoding only accepts bytes")
            value = value.encode(self._encoding)
        return zlib.compress(value, self._level)

    def deserialize(self, value: bytes, options: Mapping[str, Any] | None = None) -> str | bytes:
        raw = zlib.decompress(value)
        if self._encoding is None:
            return raw
        return raw.decode(self._encoding)
