"""Tests for expression compilation and join folding."""

import sys
import unittest
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT / "src"))

from QueryBridge.catalog import IndexOptions, Snapshot, SnapshotVisibility, StaticCatalog
from QueryBridge.core.ast import (
    AndList,
    Contains,
    Eq,
    FuzzyLikeThis,
    Gt,
    IndexLink,
    Linked,
    MoreLikeThis,
    Ne,
    Not,
    OrList,
    QualifiedField,
    QualifiedIndex,
    RangeTerm,
    StringTerm,
    WithList,
)
from QueryBridge.core.errors import (
    AmbiguousNestedPathError,
    CollaboratorFailure,
    CompileError,
    PathNotFoundError,
    TermMismatchError,
    UnsupportedConstructError,
)
from QueryBridge.dsl import DslCompiler, term_to_dsl

PRODUCTS = QualifiedIndex("public", "products", "idxproducts")
ORDERS = QualifiedIndex("public", "orders", "idxorders")
CUSTOMERS = QualifiedIndex("public", "customers", "idxcustomers")
ROOT = IndexLink.from_relation(PRODUCTS)

PRODUCTS_TO_ORDERS = IndexLink(None, "id", ORDERS, "product_id")
ORDERS_TO_CUSTOMERS = IndexLink(None, "customer_id", CUSTOMERS, "id")


class _Unavailable:
    """Collaborator stub whose every call fails."""

    def resolve(self, index):
        raise RuntimeError("catalog offline")

    def discover_links(self, index):
        raise RuntimeError("topology offline")

    def build_clause(self, backend_name, type_name):
        raise RuntimeError("snapshot expired")


class _RecordingVisibility:
    def __init__(self) -> None:
        self.calls: list[str] = []
        self.types: list[str] = []

    def build_clause(self, backend_name, type_name):
        self.calls.append(backend_name)
        self.types.append(type_name)
        return {"visible": backend_name}


def _catalog() -> StaticCatalog:
    return StaticCatalog.from_entries(
        [
            (PRODUCTS, IndexOptions(backend_name="db.products", links=(PRODUCTS_TO_ORDERS,))),
            (ORDERS, IndexOptions(backend_name="db.orders", links=(ORDERS_TO_CUSTOMERS,))),
            (CUSTOMERS, IndexOptions(backend_name="db.customers")),
        ]
    )


def _compiler(visibility=None, ignore_visibility: bool = False) -> DslCompiler:
    catalog = _catalog()
    return DslCompiler(
        catalog=catalog,
        links=catalog,
        visibility=visibility or _RecordingVisibility(),
        ignore_visibility=ignore_visibility,
    )


def _eq(field: str, value: str = "x") -> Eq:
    return Eq(QualifiedField(field), StringTerm(value))


def _term(field: str, value: str = "x") -> dict:
    return {"term": {field: {"value": value, "boost": 1.0}}}


class TestBooleanStructure(unittest.TestCase):
    def setUp(self) -> None:
        self.compiler = _compiler()

    def test_and_preserves_order_and_count(self) -> None:
        expr = AndList((_eq("a", "1"), _eq("b", "2"), _eq("c", "3")))
        self.assertEqual(
            self.compiler.compile(ROOT, expr),
            {"bool": {"must": [_term("a", "1"), _term("b", "2"), _term("c", "3")]}},
        )

    def test_or_preserves_order_and_count(self) -> None:
        expr = OrList((_eq("b"), _eq("a")))
        self.assertEqual(self.compiler.compile(ROOT, expr), {"bool": {"should": [_term("b"), _term("a")]}})

    def test_double_negation_is_kept(self) -> None:
        expr = Not(Not(_eq("a")))
        self.assertEqual(
            self.compiler.compile(ROOT, expr),
            {"bool": {"must_not": [{"bool": {"must_not": [_term("a")]}}]}},
        )

    def test_comparison_matches_term_encoder(self) -> None:
        expr = Gt(QualifiedField("price"), StringTerm("10"))
        self.assertEqual(
            self.compiler.compile(ROOT, expr),
            term_to_dsl(expr.field, expr.term, expr.opcode),
        )

    def test_ne_is_negated_equality(self) -> None:
        expr = Ne(QualifiedField("a"), StringTerm("x"))
        self.assertEqual(self.compiler.compile(ROOT, expr), {"bool": {"must_not": [_term("a")]}})

    def test_similarity_comparisons_are_unsupported(self) -> None:
        for expr in (
            MoreLikeThis(QualifiedField("title"), StringTerm("shoe")),
            FuzzyLikeThis(QualifiedField("title"), StringTerm("shoe")),
        ):
            with self.subTest(expr=expr):
                with self.assertRaises(UnsupportedConstructError):
                    self.compiler.compile(ROOT, expr)

    def test_any_leaf_failure_aborts_the_whole_query(self) -> None:
        expr = AndList((_eq("a"), Gt(QualifiedField("price"), RangeTerm("1", "2"))))
        with self.assertRaises(TermMismatchError):
            self.compiler.compile(ROOT, expr)


class TestWithList(unittest.TestCase):
    def setUp(self) -> None:
        self.compiler = _compiler()

    def test_shared_path_becomes_nested(self) -> None:
        expr = WithList((_eq("variants.color", "red"), _eq("variants.size", "9")))
        self.assertEqual(
            self.compiler.compile(ROOT, expr),
            {
                "nested": {
                    "path": "variants",
                    "query": {"bool": {"must": [_term("variants.color", "red"), _term("variants.size", "9")]}},
                }
            },
        )

    def test_conflicting_paths_fail(self) -> None:
        expr = WithList((_eq("variants.color"), _eq("reviews.stars")))
        with self.assertRaises(AmbiguousNestedPathError) as ctx:
            self.compiler.compile(ROOT, expr)
        self.assertIs(ctx.exception.node, expr)

    def test_missing_path_fails(self) -> None:
        with self.assertRaises(AmbiguousNestedPathError):
            self.compiler.compile(ROOT, WithList((_eq("title"), _eq("price"))))

    def test_top_level_field_beside_nested_field_fails(self) -> None:
        expr = WithList((_eq("a.b", "x"), _eq("c", "y")))
        with self.assertRaises(AmbiguousNestedPathError) as ctx:
            self.compiler.compile(ROOT, expr)
        self.assertIs(ctx.exception.node, expr)


class TestLinked(unittest.TestCase):
    def test_self_link_compiles_like_its_child(self) -> None:
        compiler = _compiler()
        child = AndList((_eq("a"), _eq("b")))
        linked = Linked(IndexLink.from_relation(PRODUCTS), child)

        self.assertEqual(compiler.compile(ROOT, linked), compiler.compile(ROOT, child))

    def test_single_hop_wraps_subselect_with_visibility(self) -> None:
        visibility = _RecordingVisibility()
        compiler = _compiler(visibility)

        result = compiler.compile(ROOT, Linked(PRODUCTS_TO_ORDERS, _eq("status", "paid")))

        self.assertEqual(
            result,
            {
                "subselect": {
                    "index": "db.orders",
                    "type": "_doc",
                    "left_fieldname": "id",
                    "right_fieldname": "product_id",
                    "query": {
                        "bool": {
                            "must": [_term("status", "paid")],
                            "filter": [{"visible": "db.orders"}],
                        }
                    },
                }
            },
        )
        self.assertEqual(visibility.calls, ["db.orders"])
        self.assertEqual(visibility.types, ["_doc"])

    def test_two_hops_nest_innermost_last(self) -> None:
        visibility = _RecordingVisibility()
        compiler = _compiler(visibility)
        link = IndexLink(None, "customer_id", CUSTOMERS, "id")

        result = compiler.compile(ROOT, Linked(link, _eq("region", "EU")))

        outer = result["subselect"]
        self.assertEqual(outer["index"], "db.orders")
        self.assertEqual((outer["left_fieldname"], outer["right_fieldname"]), ("id", "product_id"))
        self.assertEqual(outer["query"]["bool"]["filter"], [{"visible": "db.orders"}])

        inner = outer["query"]["bool"]["must"][0]["subselect"]
        self.assertEqual(inner["index"], "db.customers")
        self.assertEqual((inner["left_fieldname"], inner["right_fieldname"]), ("customer_id", "id"))
        self.assertEqual(
            inner["query"],
            {"bool": {"must": [_term("region", "EU")], "filter": [{"visible": "db.customers"}]}},
        )
        self.assertEqual(sorted(visibility.calls), ["db.customers", "db.orders"])

    def test_index_type_name_overrides_default_doc_type(self) -> None:
        catalog = StaticCatalog.from_entries(
            [
                (PRODUCTS, IndexOptions(backend_name="db.products", links=(PRODUCTS_TO_ORDERS,))),
                (ORDERS, IndexOptions(backend_name="db.orders", type_name="order", links=(ORDERS_TO_CUSTOMERS,))),
                (CUSTOMERS, IndexOptions(backend_name="db.customers")),
            ]
        )
        visibility = _RecordingVisibility()
        compiler = DslCompiler(catalog=catalog, links=catalog, visibility=visibility, doc_type="doc")

        result = compiler.compile(ROOT, Linked(ORDERS_TO_CUSTOMERS, _eq("region")))

        outer = result["subselect"]
        inner = outer["query"]["bool"]["must"][0]["subselect"]
        self.assertEqual(outer["type"], "order")
        self.assertEqual(inner["type"], "doc")
        self.assertEqual(list(zip(visibility.calls, visibility.types)), [("db.customers", "doc"), ("db.orders", "order")])

    def test_ignore_visibility_skips_filters(self) -> None:
        visibility = _RecordingVisibility()
        compiler = _compiler(visibility, ignore_visibility=True)

        result = compiler.compile(ROOT, Linked(PRODUCTS_TO_ORDERS, _eq("status")))

        self.assertEqual(result["subselect"]["query"], _term("status"))
        self.assertEqual(visibility.calls, [])

    def test_snapshot_visibility_clause(self) -> None:
        catalog = _catalog()
        compiler = DslCompiler(
            catalog=catalog,
            links=catalog,
            visibility=SnapshotVisibility(Snapshot(my_xid=7, xmin=10, xmax=20, command_id=3, active_xids=(15, 12))),
        )

        result = compiler.compile(ROOT, Linked(PRODUCTS_TO_ORDERS, _eq("status")))

        clause = result["subselect"]["query"]["bool"]["filter"][0]["visibility"]
        self.assertEqual(clause["index"], "db.orders")
        self.assertEqual(clause["type"], "_doc")
        self.assertEqual(clause["active_xids"], [12, 15])
        self.assertEqual((clause["myxid"], clause["xmin"], clause["xmax"], clause["commandid"]), (7, 10, 20, 3))

    def test_nested_linked_is_resolved_from_the_target(self) -> None:
        compiler = _compiler(ignore_visibility=True)
        expr = Linked(PRODUCTS_TO_ORDERS, AndList((_eq("status"), Linked(ORDERS_TO_CUSTOMERS, _eq("region")))))

        result = compiler.compile(ROOT, expr)

        must = result["subselect"]["query"]["bool"]["must"]
        self.assertEqual(must[0], _term("status"))
        self.assertEqual(must[1]["subselect"]["index"], "db.customers")

    def test_unreachable_target(self) -> None:
        compiler = _compiler()
        link = IndexLink(None, "id", QualifiedIndex("public", "vendors"), "product_id")
        with self.assertRaises(PathNotFoundError):
            compiler.compile(ROOT, Linked(link, _eq("name")))

    def test_path_resolution(self) -> None:
        path = _compiler().resolve_path(ROOT, CUSTOMERS)
        self.assertEqual(path, [PRODUCTS_TO_ORDERS, ORDERS_TO_CUSTOMERS])

    def test_fold_of_empty_path_is_identity(self) -> None:
        query = _term("a")
        self.assertEqual(_compiler().fold([], query), query)


class TestCollaboratorFailures(unittest.TestCase):
    def test_topology_failure(self) -> None:
        catalog = _catalog()
        compiler = DslCompiler(catalog=catalog, links=_Unavailable(), visibility=_RecordingVisibility())
        with self.assertRaises(CollaboratorFailure) as ctx:
            compiler.compile(ROOT, Linked(PRODUCTS_TO_ORDERS, _eq("a")))
        self.assertEqual(ctx.exception.stage, "topology")
        self.assertIsInstance(ctx.exception.cause, RuntimeError)

    def test_catalog_failure(self) -> None:
        compiler = DslCompiler(catalog=_Unavailable(), links=_catalog(), visibility=_RecordingVisibility())
        with self.assertRaises(CollaboratorFailure) as ctx:
            compiler.compile(ROOT, Linked(PRODUCTS_TO_ORDERS, _eq("a")))
        self.assertEqual(ctx.exception.stage, "catalog")

    def test_visibility_failure(self) -> None:
        catalog = _catalog()
        compiler = DslCompiler(catalog=catalog, links=catalog, visibility=_Unavailable())
        with self.assertRaises(CollaboratorFailure) as ctx:
            compiler.compile(ROOT, Linked(PRODUCTS_TO_ORDERS, _eq("a")))
        self.assertEqual(ctx.exception.stage, "visibility")

    def test_visibility_is_not_consulted_when_ignored(self) -> None:
        catalog = _catalog()
        compiler = DslCompiler(catalog=catalog, links=catalog, visibility=_Unavailable(), ignore_visibility=True)
        result = compiler.compile(ROOT, Linked(PRODUCTS_TO_ORDERS, _eq("a")))
        self.assertIn("subselect", result)

    def test_unknown_index_in_catalog(self) -> None:
        vendors = QualifiedIndex("public", "vendors")
        link = IndexLink(None, "vendor_id", vendors, "id")
        catalog = StaticCatalog.from_entries(
            [(PRODUCTS, IndexOptions(backend_name="db.products", links=(link,)))]
        )
        compiler = DslCompiler(catalog=catalog, links=catalog, visibility=_RecordingVisibility())
        with self.assertRaises(CollaboratorFailure) as ctx:
            compiler.compile(ROOT, Linked(link, _eq("name")))
        self.assertEqual(ctx.exception.stage, "topology")

    def test_failures_are_compile_errors(self) -> None:
        for error in (CollaboratorFailure, PathNotFoundError, AmbiguousNestedPathError, UnsupportedConstructError):
            self.assertTrue(issubclass(error, CompileError))


class TestContainsAlias(unittest.TestCase):
    def test_contains_and_eq_compile_identically(self) -> None:
        compiler = _compiler()
        field = QualifiedField("title")
        self.assertEqual(
            compiler.compile(ROOT, Contains(field, StringTerm("a"))),
            compiler.compile(ROOT, Eq(field, StringTerm("a"))),
        )


if __name__ == "__main__":
    unittest.main()
