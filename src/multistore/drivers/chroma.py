"""ChromaDB search-index driver.

Keeps a searchable copy of stored objects in a ChromaDB collection. By
default it is not a read source (``readable=False``): it answers find()
with metadata filters and find_by() with nearest-neighbour queries.

Usage:
    from multistore.drivers.chroma import ChromaDriver
    from multistore.drivers.models import VectorQuery

    index = ChromaDriver("docs", embed=my_embedder)     # ephemeral
    index = ChromaDriver("docs", path="./chroma_data")   # persistent

    store = await create([MemoryDriver(), index])
    await store.find({"status": "active"})
    await store.find_by(VectorQuery(embedding=[0.1, 0.2, 0.3], limit=5))
"""

from __future__ import annotations

import asyncio
import json
from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Any

from multistore.drivers.models import (
    DriverOptions,
    Filter,
    FilterGroup,
    FilterOperator,
    VectorQuery,
)
from multistore.logs import get_logger

if TYPE_CHECKING:
    import chromadb
    from chromadb.api.models.Collection import Collection

logger = get_logger(__name__)

# Reserved metadata key used internally
_JSON_KEY = "_json"

_OPERATORS = {
    FilterOperator.EQ: "$eq",
    FilterOperator.NE: "$ne",
    FilterOperator.GT: "$gt",
    FilterOperator.GTE: "$gte",
    FilterOperator.LT: "$lt",
    FilterOperator.LTE: "$lte",
    FilterOperator.IN: "$in",
    FilterOperator.NIN: "$nin",
}


def _to_metadata(value: Any, exclude: frozenset[str] = frozenset()) -> dict[str, Any]:
    """Flatten a value into ChromaDB metadata.

    ChromaDB metadata only supports str, int, float, bool values.
    Complex nested structures are JSON-serialized, None is stored as a
    sentinel key, and non-mapping values are stored whole under ``_json``.

    Args:
        value: Value to store.
        exclude: Keys kept out of metadata (e.g. the embedding).

    Returns:
        Dictionary suitable for ChromaDB metadata.

    Raises:
        TypeError: A mapping key is not a string.
    """
    if not isinstance(value, Mapping):
        return {_JSON_KEY: json.dumps(value)}

    metadata: dict[str, Any] = {}
    for key, item in value.items():
        if not isinstance(key, str):
            raise TypeError(f"ChromaDB metadata keys must be str, got {key!r}")
        if key in exclude or key.startswith("_"):
            continue
        if isinstance(item, str | int | float | bool):
            metadata[key] = item
        elif item is None:
            metadata[f"_null_{key}"] = True
        else:
            metadata[f"_json_{key}"] = json.dumps(item)
    return metadata


def _from_metadata(metadata: Mapping[str, Any]) -> Any:
    """Rebuild a value flattened by _to_metadata."""
    if _JSON_KEY in metadata:
        return json.loads(metadata[_JSON_KEY])

    value: dict[str, Any] = {}
    for key, item in metadata.items():
        if key.startswith("_null_"):
            value[key[6:]] = None
        elif key.startswith("_json_"):
            value[key[6:]] = json.loads(item)
        else:
            value[key] = item
    return value


def _build_where(criteria: Filter | FilterGroup | Mapping[str, Any] | None) -> dict[str, Any] | None:
    """Convert search criteria to a ChromaDB where clause.

    A plain mapping means field equality on every key.
    """
    if criteria is None:
        return None

    if isinstance(criteria, Mapping):
        group = FilterGroup(
            filters=[Filter(key, FilterOperator.EQ, value) for key, value in criteria.items()]
        )
        return _build_where(group)

    if isinstance(criteria, Filter):
        if criteria.operator == FilterOperator.EQ:
            # Simple equality can omit operator
            return {criteria.field: criteria.value}
        return {criteria.field: {_OPERATORS[criteria.operator]: criteria.value}}

    children = [_build_where(f) for f in criteria.filters]
    children = [c for c in children if c is not None]

    if not children:
        return None
    if len(children) == 1:
        return children[0]

    chroma_op = "$and" if criteria.operator == "and" else "$or"
    return {chroma_op: children}


class ChromaDriver:
    """Driver indexing objects in a ChromaDB collection.

    ChromaDB is synchronous; every call runs in the default thread executor.

    Args:
        collection_name: Collection to use or create.
        client: Existing ChromaDB client. Takes precedence over ``path``.
        path: Directory for a persistent client. Ephemeral when omitted.
        id_field: Field holding the object id.
        text_field: Field indexed as the document text, if any.
        embedding_field: Field holding a precomputed embedding.
        embed: Callable computing an embedding from the stored value. Used
            when the value carries no ``embedding_field``.
        **options: DriverOptions fields. find/find_by are provided.
    """

    def __init__(
        self,
        collection_name: str,
        *,
        client: chromadb.ClientAPI | None = None,  # type: ignore[name-defined]
        path: str | None = None,
        id_field: str = "id",
        text_field: str | None = None,
        embedding_field: str = "embedding",
        embed: Callable[[Any], list[float]] | None = None,
        **options: Any,
    ) -> None:
        options.setdefault("find", self._find)
        options.setdefault("find_by", self._find_by)
        self.options = DriverOptions.from_mapping(options)
        self.collection_name = collection_name
        self.id_field = id_field
        self.text_field = text_field
        self.embedding_field = embedding_field
        self._embed = embed
        self._client = client
        self._path = path
        self._collection: Collection | None = None

    def __repr__(self) -> str:
        return f"ChromaDriver(collection={self.collection_name!r})"

    @property
    def collection(self) -> Collection:
        """Get the underlying ChromaDB collection."""
        if self._collection is None:
            raise RuntimeError(f"{self!r} used before init()")
        return self._collection

    async def _run(self, fn: Callable[[], Any]) -> Any:
        return await asyncio.get_running_loop().run_in_executor(None, fn)

    def _connect(self) -> Collection:
        if self._client is None:
            try:
                import chromadb
            except ImportError as e:
                raise ImportError(
                    "chromadb is required for ChromaDriver. "
                    "Install with: pip install multistore[chroma]"
                ) from e

            if self._path is not None:
                self._client = chromadb.PersistentClient(path=self._path)
            else:
                self._client = chromadb.EphemeralClient()
        return self._client.get_or_create_collection(name=self.collection_name)

    async def init(self) -> None:
        self._collection = await self._run(self._connect)
        logger.debug("chroma_collection_ready", collection=self.collection_name)

    async def stop(self) -> None:
        self._collection = None

    def _record(self, obj: Any, options: Mapping[str, Any] | None) -> dict[str, Any]:
        if isinstance(obj, Mapping) and self.id_field in obj:
            id_ = obj[self.id_field]
        elif options and "id" in options:
            id_ = options["id"]
        else:
            raise KeyError(f"Cannot determine id: value has no {self.id_field!r} field")

        record: dict[str, Any] = {
            "ids": [str(id_)],
            "metadatas": [_to_metadata(obj, exclude=frozenset({self.embedding_field}))],
        }
        embedding = obj.get(self.embedding_field) if isinstance(obj, Mapping) else None
        if embedding is None and self._embed is not None:
            embedding = self._embed(obj)
        if embedding is not None:
            record["embeddings"] = [list(embedding)]
        if self.text_field is not None and isinstance(obj, Mapping):
            record["documents"] = [str(obj.get(self.text_field, ""))]
        return record

    async def put(self, obj: Any, options: Mapping[str, Any] | None = None) -> None:
        record = self._record(obj, options)
        await self._run(lambda: self.collection.upsert(**record))

    async def get(self, id: Any, options: Mapping[str, Any] | None = None) -> Any:
        result = await self._run(lambda: self.collection.get(ids=[str(id)], include=["metadatas"]))
        if not result["ids"]:
            return None
        return _from_metadata(result["metadatas"][0])  # type: ignore[index]

    async def delete(self, id: Any, options: Mapping[str, Any] | None = None) -> None:
        await self._run(lambda: self.collection.delete(ids=[str(id)]))

    async def _find(
        self,
        criteria: Filter | FilterGroup | Mapping[str, Any],
        options: Mapping[str, Any] | None,
        driver: ChromaDriver,
    ) -> list[Any]:
        """Return every indexed value matching the metadata filters."""
        where = _build_where(criteria)
        limit = options.get("limit") if options else None
        result = await self._run(
            lambda: self.collection.get(where=where, limit=limit, include=["metadatas"])
        )
        return [_from_metadata(metadata) for metadata in result["metadatas"] or []]

    async def _find_by(
        self,
        query: VectorQuery | list[float],
        options: Mapping[str, Any] | None,
        driver: ChromaDriver,
    ) -> list[Any]:
        """Return the values nearest to the query embedding, closest first."""
        if not isinstance(query, VectorQuery):
            query = VectorQuery(embedding=list(query))
        where = _build_where(query.filters)
        result = await self._run(
            lambda: self.collection.query(
                query_embeddings=[query.embedding],  # type: ignore[arg-type]
                n_results=query.limit,
                where=where,
                include=["metadatas", "distances"],
            )
        )
        if not result["ids"] or not result["ids"][0]:
            return []
        return [_from_metadata(metadata) for metadata in result["metadatas"][0]]  # type: ignore[index]
