import os
import tempfile
import unittest
from pathlib import Path

import yaml

from incbak.config import CONFIG_SCHEMA, TRACE_EVENT_SCHEMA, load_schema, validate_config, validate_trace_file
from incbak.core.backup import run_backup
from incbak.core.errors import EntryError
from incbak.core.run_config import RunConfig
from incbak.resources import contract_examples_dir

CUTOFF = 1704067200


class TestContractExamples(unittest.TestCase):
    def setUp(self) -> None:
        self.examples_dir = contract_examples_dir()

    def test_schemas_are_valid(self) -> None:
        self.assertEqual(load_schema(CONFIG_SCHEMA)["type"], "object")
        self.assertIn("event_type", load_schema(TRACE_EVENT_SCHEMA)["required"])

    def test_config_example_validates(self) -> None:
        instance = yaml.safe_load((self.examples_dir / "backup_config.example.yml").read_text(encoding="utf-8"))
        self.assertEqual(validate_config(instance), [])

    def test_trace_sample_validates(self) -> None:
        self.assertEqual(validate_trace_file(self.examples_dir / "trace.sample.jsonl"), [])

    def test_trace_of_real_run_validates(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            root = Path(td) / "root"
            (root / "sub").mkdir(parents=True)
            for rel in ("a.txt", "sub/b.txt"):
                p = root / rel
                p.write_text(rel, encoding="utf-8")
                os.utime(p, (CUTOFF + 5, CUTOFF + 5))
            trace_path = Path(td) / "trace.jsonl"

            run_backup(RunConfig(root=root, cutoff=CUTOFF, output_path=Path(td) / "o.zip", trace_path=trace_path))
            self.assertEqual(validate_trace_file(trace_path), [])

    @unittest.skipUnless(hasattr(os, "symlink"), "symlinks not supported")
    def test_trace_of_failed_run_validates(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            root = Path(td) / "root"
            root.mkdir()
            os.symlink(root / "nowhere", root / "dangling")
            trace_path = Path(td) / "trace.jsonl"

            with self.assertRaises(EntryError):
                run_backup(RunConfig(root=root, cutoff=CUTOFF, output_path=Path(td) / "o.zip", trace_path=trace_path))
            self.assertEqual(validate_trace_file(trace_path), [])


if __name__ == "__main__":
    unittest.main()
