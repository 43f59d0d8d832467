"""
Reference resolver for a batch of loaded schema documents.

Builds a lookup index over the batch, resolves every extracted $ref through
an ordered cascade of matchers and records the result as `referenced_by`
edges on the target schemas.

Batches are resolved by independent workers. Each worker reads the shared
index, keeps its own memoization cache (seeded from the previous pass when
the index is unchanged) and returns a list of
(source_id, target_id) edges; the edges are applied to the schemas in one
sequential merge step after every batch has finished.
"""

from __future__ import annotations

import logging
import posixpath
import re
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field

from .loader import COMPOUND_SUFFIX, LoadedSchema, SchemaReference

logger = logging.getLogger(__name__)

_JSON_TOKEN = re.compile(r"([^/#\s]+)\.json")

# (source id, declared schema name, $ref) -> cascade result (None for a miss)
CacheKey = tuple[str, str, str]


def _strip_suffix(text: str, suffix: str) -> str:
    return text[: -len(suffix)] if text.endswith(suffix) else text


def index_keys(schema: LoadedSchema) -> list[str]:
    """All keys under which a schema can be found."""
    relative_path = schema.relative_path
    base_name = posixpath.basename(relative_path)
    keys = [
        schema.name,
        relative_path,
        _strip_suffix(base_name, ".json"),
        _strip_suffix(schema.name, ".schema"),
        _strip_suffix(relative_path, COMPOUND_SUFFIX),
        _strip_suffix(base_name, COMPOUND_SUFFIX),
    ]
    seen: list[str] = []
    for key in keys:
        if key and key not in seen:
            seen.append(key)
    return seen


def extract_ref_basename(ref: str) -> str:
    """
    Best-guess schema name of a $ref string.

    Rules, in order:
        "#/$defs/Thing"                 -> "Thing"
        "./objects/Thing.schema.json"  -> "Thing"
        "other/Thing.json#/x"           -> "Thing"
        "objects/Thing"                 -> "Thing"
        anything else                   -> unchanged
    """
    if ref.startswith("#/"):
        return ref.rsplit("/", 1)[-1]
    if COMPOUND_SUFFIX in ref:
        path_part = ref.split("#", 1)[0]
        return _strip_suffix(posixpath.basename(path_part), COMPOUND_SUFFIX)
    match = _JSON_TOKEN.search(ref)
    if match:
        return match.group(1)
    if "/" in ref:
        return ref.rstrip("/").rsplit("/", 1)[-1]
    return ref


@dataclass
class ReferenceIndex:
    """Lookup from every key of every schema to its id (first schema wins)."""

    keys: dict[str, str] = field(default_factory=dict)

    @staticmethod
    def build(schemas: list[LoadedSchema]) -> ReferenceIndex:
        index = ReferenceIndex()
        for schema in schemas:
            for key in index_keys(schema):
                index.keys.setdefault(key, schema.id)
        return index

    def get(self, key: str) -> str | None:
        return self.keys.get(key)

    def find_case_insensitive(self, *candidates: str) -> str | None:
        """Linear scan comparing keys case-insensitively."""
        wanted = [candidate.lower() for candidate in candidates if candidate]
        if not wanted:
            return None
        for key, schema_id in self.keys.items():
            if key.lower() in wanted:
                return schema_id
        return None


def match_reference(reference: SchemaReference, index: ReferenceIndex) -> str | None:
    """
    Run the resolution cascade for one reference, stopping at the first hit.

    1. the declared schema name
    2. the basename extracted from the $ref string
    3. the $ref without a leading "./" and without the compound suffix
    4. a case-insensitive scan of all keys
    """
    target = index.get(reference.schema_name)
    if target is not None:
        return target

    basename = extract_ref_basename(reference.ref)
    target = index.get(basename)
    if target is not None:
        return target

    stripped = reference.ref[2:] if reference.ref.startswith("./") else reference.ref
    stripped = _strip_suffix(stripped, COMPOUND_SUFFIX)
    target = index.get(stripped)
    if target is not None:
        return target

    return index.find_case_insensitive(reference.schema_name, basename)


def resolve_reference(
    reference: SchemaReference,
    source_id: str,
    index: ReferenceIndex,
    cache: dict[CacheKey, str | None],
) -> str | None:
    """
    Resolve a reference of `source_id`, memoizing hits and misses in `cache`.

    Self-references resolve to None.
    """
    key = (source_id, reference.schema_name, reference.ref)
    if key not in cache:
        cache[key] = match_reference(reference, index)
    target = cache[key]
    return None if target == source_id else target


@dataclass
class ResolutionStats:
    """Aggregate counts of a resolution pass."""

    total_references: int = 0
    resolved: int = 0
    unresolved: int = 0
    self_references: int = 0
    cache_hits: int = 0
    batches: int = 0
    # (source schema id, $ref) pairs that matched nothing
    unresolved_refs: list[tuple[str, str]] = field(default_factory=list)

    def add(self, other: ResolutionStats) -> None:
        self.total_references += other.total_references
        self.resolved += other.resolved
        self.unresolved += other.unresolved
        self.self_references += other.self_references
        self.cache_hits += other.cache_hits
        self.unresolved_refs.extend(other.unresolved_refs)

    def to_dict(self) -> dict:
        return {
            "totalReferences": self.total_references,
            "resolved": self.resolved,
            "unresolved": self.unresolved,
            "selfReferences": self.self_references,
            "cacheHits": self.cache_hits,
            "batches": self.batches,
            "unresolvedRefs": [{"source": source, "$ref": ref} for source, ref in self.unresolved_refs],
        }


@dataclass
class BatchResult:
    """Edges and cache entries produced by one worker."""

    edges: list[tuple[str, str]] = field(default_factory=list)
    cache: dict[CacheKey, str | None] = field(default_factory=dict)
    stats: ResolutionStats = field(default_factory=ResolutionStats)


def resolve_batch(
    batch: list[LoadedSchema],
    index: ReferenceIndex,
    seed: dict[CacheKey, str | None] | None = None,
) -> BatchResult:
    """Resolve every reference of a batch. Reads only the shared index.

    `seed` holds cache entries of an earlier pass over the same index; entries
    for the batch's own schemas are copied into the worker cache.
    """
    result = BatchResult()
    if seed:
        source_ids = {schema.id for schema in batch}
        result.cache = {key: target for key, target in seed.items() if key[0] in source_ids}
    stats = result.stats
    for schema in batch:
        for reference in schema.references:
            stats.total_references += 1
            key = (schema.id, reference.schema_name, reference.ref)
            if key in result.cache:
                stats.cache_hits += 1
            target = resolve_reference(reference, schema.id, index, result.cache)
            if target is None and result.cache[key] == schema.id:
                stats.self_references += 1
                continue
            if target is None:
                stats.unresolved += 1
                stats.unresolved_refs.append((schema.id, reference.ref))
                continue
            stats.resolved += 1
            result.edges.append((schema.id, target))
    return result


class ReferenceResolver:
    """Populates `referenced_by` across a batch of loaded schemas."""

    def __init__(self, batch_size: int = 50, max_workers: int = 4):
        """
        Initialize the resolver.

        Args:
            batch_size: Number of schemas handed to one worker
            max_workers: Parallel workers (1 = resolve batches sequentially)
        """
        self.batch_size = max(1, batch_size)
        self.max_workers = max(1, max_workers)
        self.cache: dict[CacheKey, str | None] = {}
        # Index the cache was built against; a different index invalidates it
        self._cache_index: ReferenceIndex | None = None

    def resolve(self, schemas: list[LoadedSchema]) -> ResolutionStats:
        """
        Recompute `referenced_by` for every schema in place.

        A repeated pass over a batch with the same index reuses the cache of
        the previous pass.

        Args:
            schemas: The loaded schema batch

        Returns:
            ResolutionStats for the pass
        """
        index = ReferenceIndex.build(schemas)
        batches = [schemas[i : i + self.batch_size] for i in range(0, len(schemas), self.batch_size)]
        seed = self.cache if index == self._cache_index else None

        if self.max_workers == 1 or len(batches) <= 1:
            results = [resolve_batch(batch, index, seed) for batch in batches]
        else:
            with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
                results = list(executor.map(lambda batch: resolve_batch(batch, index, seed), batches))

        stats = self._merge(schemas, results)
        self._cache_index = index
        stats.batches = len(batches)
        logger.info(
            "Resolved references: %d total, %d resolved, %d unresolved",
            stats.total_references,
            stats.resolved,
            stats.unresolved,
        )
        logger.debug("Reference cache: %d entries, %d hits", len(self.cache), stats.cache_hits)
        return stats

    def _merge(self, schemas: list[LoadedSchema], results: list[BatchResult]) -> ResolutionStats:
        """Apply all worker edges on the calling thread."""
        by_id = {schema.id: schema for schema in schemas}
        for schema in schemas:
            schema.referenced_by.clear()

        self.cache = {}
        stats = ResolutionStats()
        for result in results:
            for source_id, target_id in result.edges:
                target = by_id.get(target_id)
                if target is not None and source_id != target_id:
                    target.referenced_by.add(source_id)
            self.cache.update(result.cache)
            stats.add(result.stats)
        return stats
