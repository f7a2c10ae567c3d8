"""Tests for layered config parsing and validation."""

import sys
import unittest
from copy import deepcopy
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT / "src"))

from QueryBridge.config import parse_config_dict
from QueryBridge.core.ast import QualifiedIndex


def _base_raw_config() -> dict:
    return {
        "log": {"level": "INFO", "to_file": False, "dir": "log"},
        "compiler": {
            "root": "public.products.idxproducts",
            "ignore_visibility": False,
            "doc_type": "_doc",
        },
        "visibility": {
            "my_xid": 0,
            "xmin": 100,
            "xmax": 104,
            "command_id": 0,
            "active_xids": [101, 103],
        },
        "indexes": [
            {
                "name": "public.products.idxproducts",
                "backend_name": "db.products",
                "links": ["id=<public.orders.idxorders>product_id"],
            },
            {
                "name": "public.orders.idxorders",
                "backend_name": "db.orders",
                "type_name": "order",
            },
        ],
        "output": {"base_dir": "output", "formats": ["console"]},
    }


class TestConfigLayering(unittest.TestCase):
    def test_parse_success_nested_access(self) -> None:
        cfg = parse_config_dict(_base_raw_config())
        self.assertEqual(cfg.runtime.level, "INFO")
        self.assertEqual(cfg.compiler.root, QualifiedIndex("public", "products", "idxproducts"))
        self.assertEqual(cfg.visibility.active_xids, (101, 103))
        self.assertEqual(len(cfg.catalog.indexes), 2)
        self.assertEqual(cfg.catalog.indexes[1].options.type_name, "order")
        self.assertIsNone(cfg.catalog.indexes[0].options.type_name)
        self.assertEqual(cfg.catalog.indexes[0].options.links[0].right_field, "product_id")

    def test_optional_sections_use_defaults(self) -> None:
        raw = _base_raw_config()
        for key in ("log", "visibility", "output"):
            del raw[key]
        cfg = parse_config_dict(raw)
        self.assertEqual(cfg.runtime.level, "INFO")
        self.assertEqual(cfg.visibility.active_xids, ())
        self.assertEqual(cfg.output.formats, ("console",))

    def test_missing_compiler_root(self) -> None:
        raw = _base_raw_config()
        del raw["compiler"]["root"]
        with self.assertRaisesRegex(ValueError, "compiler\\.root"):
            parse_config_dict(raw)

    def test_root_must_be_declared(self) -> None:
        raw = _base_raw_config()
        raw["compiler"]["root"] = "public.vendors"
        with self.assertRaisesRegex(ValueError, "compiler\\.root"):
            parse_config_dict(raw)

    def test_output_unknown_format_error_contains_key(self) -> None:
        raw = _base_raw_config()
        raw["output"]["formats"] = ["console", "unknown"]
        with self.assertRaisesRegex(ValueError, "output\\.formats"):
            parse_config_dict(raw)

    def test_output_formats_are_normalized(self) -> None:
        raw = _base_raw_config()
        raw["output"]["formats"] = ["JSON", "json", " console "]
        cfg = parse_config_dict(raw)
        self.assertEqual(cfg.output.formats, ("json", "console"))

    def test_log_level_error(self) -> None:
        raw = _base_raw_config()
        raw["log"]["level"] = "chatty"
        with self.assertRaisesRegex(ValueError, "log\\.level"):
            parse_config_dict(raw)

    def test_visibility_type_error_contains_key(self) -> None:
        raw = _base_raw_config()
        raw["visibility"]["xmin"] = "100"
        with self.assertRaisesRegex(TypeError, "visibility\\.xmin"):
            parse_config_dict(raw)

    def test_visibility_range_error(self) -> None:
        raw = _base_raw_config()
        raw["visibility"]["xmin"] = 200
        with self.assertRaisesRegex(ValueError, "visibility\\.xmin"):
            parse_config_dict(raw)

    def test_malformed_link_error_contains_key(self) -> None:
        raw = _base_raw_config()
        raw["indexes"][0]["links"] = ["id=<orders>product_id", "orders"]
        with self.assertRaisesRegex(ValueError, "indexes\\[0\\]\\.links\\[1\\]"):
            parse_config_dict(raw)

    def test_duplicate_index_name(self) -> None:
        raw = deepcopy(_base_raw_config())
        raw["indexes"][1]["name"] = raw["indexes"][0]["name"]
        with self.assertRaisesRegex(ValueError, "indexes\\[1\\]\\.name"):
            parse_config_dict(raw)

    def test_duplicate_backend_name(self) -> None:
        raw = deepcopy(_base_raw_config())
        raw["indexes"][1]["backend_name"] = "db.products"
        with self.assertRaisesRegex(ValueError, "indexes\\[1\\]\\.backend_name"):
            parse_config_dict(raw)

    def test_empty_indexes(self) -> None:
        raw = _base_raw_config()
        raw["indexes"] = []
        with self.assertRaisesRegex(ValueError, "indexes"):
            parse_config_dict(raw)

    def test_doc_type_whitespace(self) -> None:
        raw = _base_raw_config()
        raw["compiler"]["doc_type"] = "my doc"
        with self.assertRaisesRegex(ValueError, "compiler\\.doc_type"):
            parse_config_dict(raw)

    def test_blank_type_name(self) -> None:
        raw = _base_raw_config()
        raw["indexes"][1]["type_name"] = "  "
        with self.assertRaisesRegex(ValueError, "indexes\\[1\\]\\.type_name"):
            parse_config_dict(raw)

    def test_link_to_undeclared_index(self) -> None:
        raw = _base_raw_config()
        raw["indexes"][0]["links"].append("vendor_id=<public.vendors.idxvendors>id")
        with self.assertRaisesRegex(ValueError, "indexes\\[0\\]\\.links\\[1\\] targets an undeclared index"):
            parse_config_dict(raw)


if __name__ == "__main__":
    unittest.main()
