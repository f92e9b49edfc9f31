"""Transform pipeline and reference processors."""

from multistore.pipeline.core import deserialize, deserialize_result, serialize
from multistore.pipeline.processors import (
    CompressionProcessor,
    FunctionProcessor,
    JsonProcessor,
    ModelProcessor,
)
from multistore.pipeline.protocol import Deserializer, Processor, Serializer

__all__ = [
    # Pipeline
    "serialize",
    "deserialize",
    "deserialize_result",
    # Protocols
    "Serializer",
    "Deserializer",
    "Processor",
    # Processors
    "FunctionProcessor",
    "JsonProcessor",
    "ModelProcessor",
    "CompressionProcessor",
]
