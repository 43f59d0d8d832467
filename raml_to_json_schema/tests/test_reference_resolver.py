from pathlib import Path
from unittest import TestCase

import pytest

from raml_to_json_schema.pipeline.converter import RamlConverter
from raml_to_json_schema.pipeline.references.loader import SchemaReference, build_loaded_schema, load_schemas
from raml_to_json_schema.pipeline.references.reference_resolver import (
    ReferenceIndex,
    ReferenceResolver,
    extract_ref_basename,
    index_keys,
    match_reference,
)

ROOT = Path("/schemas")
RAML_DIR = Path(__file__).parent / "test_data" / "raml"


def make_schema(relative_path, *refs):
    content = {"properties": {f"p{i}": {"$ref": ref} for i, ref in enumerate(refs)}}
    return build_loaded_schema(ROOT / relative_path, ROOT, content)


def graph(schemas):
    return {s.relative_path: sorted(s.referenced_by) for s in schemas}


@pytest.mark.parametrize(
    "ref,expected",
    [
        ("#/$defs/Thing", "Thing"),
        ("./objects/Thing.schema.json", "Thing"),
        ("./objects/Thing.schema.json#/x", "Thing"),
        ("other/Thing.json#/x", "Thing"),
        ("objects/Thing", "Thing"),
        ("Thing", "Thing"),
    ],
)
def test_extract_ref_basename(ref, expected):
    """Test schema name extraction from $ref strings"""
    assert extract_ref_basename(ref) == expected


def test_index_keys():
    """Test the keys a schema is indexed under"""
    schema = make_schema("business-objects/B.schema.json")
    assert index_keys(schema) == [
        "B.schema",
        "business-objects/B.schema.json",
        "B",
        "business-objects/B",
    ]


class TestMatchReference(TestCase):
    def setUp(self):
        self.b = make_schema("business-objects/B.schema.json")
        self.c = make_schema("C.json")
        self.index = ReferenceIndex.build([self.b, self.c])

    def test_declared_name(self):
        """Test the declared schema name matches first"""
        reference = SchemaReference(ref="anything", schema_name="B")
        self.assertEqual(match_reference(reference, self.index), self.b.id)

    def test_basename_of_ref(self):
        """Test matching by the basename of the $ref"""
        reference = SchemaReference(ref="elsewhere/C.json#/defs/x", schema_name="nomatch")
        self.assertEqual(match_reference(reference, self.index), self.c.id)

    def test_relative_path_ref(self):
        """Test matching a relative path $ref"""
        reference = SchemaReference(ref="./business-objects/B.schema.json", schema_name="nomatch")
        self.assertEqual(match_reference(reference, self.index), self.b.id)

    def test_case_insensitive(self):
        """Test the case-insensitive fallback"""
        reference = SchemaReference(ref="./b.schema.json", schema_name="b")
        self.assertEqual(match_reference(reference, self.index), self.b.id)

    def test_no_match(self):
        """Test unknown references resolve to nothing"""
        reference = SchemaReference(ref="./Missing.schema.json", schema_name="Missing")
        self.assertIsNone(match_reference(reference, self.index))

    def test_first_schema_wins_on_duplicate_keys(self):
        """Test the first loaded schema owns a duplicate key"""
        first = make_schema("a/B.schema.json")
        second = make_schema("b/B.schema.json")
        index = ReferenceIndex.build([first, second])
        reference = SchemaReference(ref="./B.schema.json", schema_name="B")
        self.assertEqual(match_reference(reference, index), first.id)


class TestReferenceResolver(TestCase):
    def test_referenced_by(self):
        """Test a resolved $ref adds the source to the target's referenced_by"""
        a = make_schema("A.schema.json", "./business-objects/B.schema.json")
        b = make_schema("business-objects/B.schema.json")
        stats = ReferenceResolver().resolve([a, b])
        self.assertEqual(b.referenced_by, {a.id})
        self.assertEqual(a.referenced_by, set())
        self.assertEqual(stats.total_references, 1)
        self.assertEqual(stats.resolved, 1)

    def test_self_reference_is_excluded(self):
        """Test a schema never lists itself in referenced_by"""
        a = make_schema("A.schema.json", "./A.schema.json", "#/$defs/A")
        stats = ReferenceResolver().resolve([a])
        self.assertEqual(a.referenced_by, set())
        self.assertEqual(stats.self_references, 2)
        self.assertEqual(stats.resolved, 0)
        self.assertEqual(stats.unresolved, 0)

    def test_unresolved_references_are_reported(self):
        """Test unresolved references are listed in the stats"""
        a = make_schema("A.schema.json", "./Missing.schema.json")
        stats = ReferenceResolver().resolve([a])
        self.assertEqual(stats.unresolved, 1)
        self.assertEqual(stats.unresolved_refs, [(a.id, "./Missing.schema.json")])
        self.assertEqual(stats.to_dict()["unresolvedRefs"], [{"source": a.id, "$ref": "./Missing.schema.json"}])

    def test_repeated_reference_hits_cache(self):
        """Test a repeated reference is answered from the cache"""
        a = make_schema("A.schema.json", "./B.schema.json", "./B.schema.json")
        b = make_schema("B.schema.json")
        resolver = ReferenceResolver()
        stats = resolver.resolve([a, b])
        self.assertEqual(stats.cache_hits, 1)
        self.assertEqual(stats.resolved, 2)
        self.assertEqual(b.referenced_by, {a.id})
        self.assertIn((a.id, "B", "./B.schema.json"), resolver.cache)

    def test_resolution_replaces_previous_edges(self):
        """Test each pass recomputes referenced_by from scratch"""
        a = make_schema("A.schema.json", "./B.schema.json")
        b = make_schema("B.schema.json")
        b.referenced_by.add("stale")
        resolver = ReferenceResolver()
        resolver.resolve([a, b])
        resolver.resolve([a, b])
        self.assertEqual(b.referenced_by, {a.id})

    def test_repeated_pass_reuses_cache(self):
        """Test a second pass over an unchanged batch answers every lookup from the cache"""
        a = make_schema("A.schema.json", "./B.schema.json", "./Missing.schema.json")
        b = make_schema("B.schema.json", "./A.schema.json")
        resolver = ReferenceResolver(batch_size=1, max_workers=2)
        first = resolver.resolve([a, b])
        second = resolver.resolve([a, b])
        self.assertEqual(first.cache_hits, 0)
        self.assertEqual(second.cache_hits, 3)
        self.assertEqual(second.resolved, first.resolved)
        self.assertEqual(b.referenced_by, {a.id})
        self.assertEqual(a.referenced_by, {b.id})

    def test_changed_batch_does_not_reuse_cache(self):
        """Test adding a schema changes the index, so stale misses are not reused"""
        a = make_schema("A.schema.json", "./Missing.schema.json")
        resolver = ReferenceResolver()
        self.assertEqual(resolver.resolve([a]).unresolved, 1)

        missing = make_schema("Missing.schema.json")
        stats = resolver.resolve([a, missing])
        self.assertEqual(stats.cache_hits, 0)
        self.assertEqual(stats.resolved, 1)
        self.assertEqual(missing.referenced_by, {a.id})

    def test_batching_is_deterministic(self):
        """Test batch size and worker count do not change the graph"""
        def build():
            schemas = [make_schema(f"S{i:02d}.schema.json", f"./S{(i + 1) % 12:02d}.schema.json") for i in range(12)]
            schemas.append(make_schema("hub.schema.json", *[f"./S{i:02d}.schema.json" for i in range(12)]))
            return schemas

        baseline = build()
        ReferenceResolver(batch_size=50, max_workers=1).resolve(baseline)
        expected = graph(baseline)

        for batch_size, workers in [(1, 4), (3, 2), (5, 8), (13, 3)]:
            schemas = build()
            stats = ReferenceResolver(batch_size=batch_size, max_workers=workers).resolve(schemas)
            self.assertEqual(graph(schemas), expected)
            self.assertEqual(stats.resolved, 24)
            self.assertEqual(stats.batches, -(-13 // batch_size))

        hub_id = baseline[-1].id
        for schema in baseline[:-1]:
            self.assertIn(hub_id, schema.referenced_by)
            self.assertEqual(len(schema.referenced_by), 2)


def test_resolves_converted_output(tmp_path):
    """Test resolving the tree written by the converter"""
    RamlConverter().convert_directory(RAML_DIR, tmp_path)
    schemas = load_schemas(tmp_path)
    stats = ReferenceResolver(batch_size=2, max_workers=3).resolve(schemas)
    by_path = {s.relative_path: s for s in schemas}
    ids = {path: s.id for path, s in by_path.items()}

    assert stats.unresolved == 0
    assert by_path["business-objects/OrderLine.schema.json"].referenced_by == {
        ids["business-objects/Order.schema.json"],
        ids["datamodelObjects.schema.json"],
    }
    assert ids["business-objects/Order.schema.json"] in by_path["common/enums/ColorEnum.schema.json"].referenced_by
    assert by_path["datamodelObjects.schema.json"].referenced_by == {ids["message.schema.json"]}
    assert by_path["metadata.schema.json"].referenced_by == {ids["message.schema.json"]}
