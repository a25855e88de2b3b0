from __future__ import annotations

import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import jsonschema  # noqa: E402
import yaml  # noqa: E402

from incbak.config import CONFIG_SCHEMA, TRACE_EVENT_SCHEMA, load_schema, validate_config, validate_trace_file  # noqa: E402
from incbak.resources import contract_examples_dir  # noqa: E402


def main() -> int:
    schema_errors = []
    for name in (CONFIG_SCHEMA, TRACE_EVENT_SCHEMA):
        try:
            load_schema(name)
        except (OSError, ValueError, jsonschema.SchemaError) as e:
            schema_errors.append((name, repr(e)))
    if schema_errors:
        print("Schema validation failed:")
        for name, err in schema_errors:
            print("- {}: {}".format(name, err))
        return 1

    examples_dir = contract_examples_dir()
    config_example = yaml.safe_load((examples_dir / "backup_config.example.yml").read_text(encoding="utf-8"))
    failures = [
        ("backup_config.example.yml", validate_config(config_example)),
        ("trace.sample.jsonl", validate_trace_file(examples_dir / "trace.sample.jsonl")),
    ]

    ok = True
    for name, errs in failures:
        if errs:
            ok = False
            print("Example {} failed validation:".format(name))
            for e in errs:
                print("  - {}".format(e))

    if not ok:
        return 1

    print("Contracts OK")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
