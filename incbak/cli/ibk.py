from __future__ import annotations

import argparse
import json
import os
import sys
from pathlib import Path
from typing import Any, Dict

from incbak.config import CONFIG_ENV_VAR, load_config_file
from incbak.core.backup import BackupResult, run_backup
from incbak.core.errors import IncbakError
from incbak.core.run_config import DEFAULT_CHUNK_SIZE, DEFAULT_OUTPUT_NAME, RunConfig
from incbak.core.timestamps import TIMESTAMP_HINT, parse_cutoff


def _format_cli_error(e: Exception) -> str:
    """
    Print-friendly error formatting for CLI commands.
    - Always includes code/message (via __str__) when it's an IncbakError
    - Includes structured `data` payload when present
    """
    if isinstance(e, IncbakError) and isinstance(e.data, dict) and e.data:
        return str(e) + "\n" + json.dumps(e.data, ensure_ascii=False, indent=2)
    return str(e)


def _load_file_config(ns: argparse.Namespace) -> Dict[str, Any]:
    cfg_path = ns.config or os.environ.get(CONFIG_ENV_VAR, "").strip()
    if not cfg_path:
        return {}
    return load_config_file(Path(cfg_path).expanduser())


def build_run_config(ns: argparse.Namespace) -> RunConfig:
    # The cutoff is validated before anything touches the filesystem.
    cutoff = parse_cutoff(ns.last_modified_date)
    file_cfg = _load_file_config(ns)

    return RunConfig.build(
        cutoff=cutoff,
        output=ns.output if ns.output is not None else file_cfg.get("output"),
        trace=ns.trace if ns.trace is not None else file_cfg.get("trace"),
        run_id=ns.run_id if ns.run_id is not None else file_cfg.get("run_id", "run_cli"),
        chunk_size=ns.chunk_size if ns.chunk_size is not None else file_cfg.get("chunk_size", DEFAULT_CHUNK_SIZE),
        dry_run=bool(ns.dry_run),
    )


def _print_result(result: BackupResult, *, as_json: bool) -> None:
    if as_json:
        print(json.dumps(result.to_dict(), ensure_ascii=False, indent=2))
        return
    if result.dry_run:
        for name in result.entries:
            print(name)
        print(f"{len(result.entries)} entries (dry run, {result.output_path} not written)")
        return
    print(f"{len(result.entries)} entries, {result.bytes_written} bytes -> {result.output_path}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ibk",
        description="Archive files in the working directory modified after a cutoff into a stored ZIP",
    )
    parser.add_argument(
        "last_modified_date",
        help=f'Cutoff timestamp (UTC), exactly "{TIMESTAMP_HINT}"; only files modified strictly after it are archived',
    )
    parser.add_argument(
        "-o",
        "--output",
        help=f"Output .zip path (default: {DEFAULT_OUTPUT_NAME} in the working directory)",
    )
    parser.add_argument("--config", help=f"YAML config file (default: ${CONFIG_ENV_VAR} when set)")
    parser.add_argument("--trace", help="Trace output path (jsonl); tracing is off when omitted")
    parser.add_argument("--run-id", help="Run ID for trace correlation (default: run_cli)")
    parser.add_argument("--chunk-size", type=int, help=f"Copy buffer size in bytes (default: {DEFAULT_CHUNK_SIZE})")
    parser.add_argument("--dry-run", action="store_true", help="List selected files without writing the archive")
    parser.add_argument("--json", action="store_true", help="Output the run result as JSON")
    return parser


def main(argv=None) -> int:
    parser = build_parser()
    ns = parser.parse_args(argv)
    try:
        config = build_run_config(ns)
        result = run_backup(config)
    except Exception as e:  # noqa: BLE001
        print(_format_cli_error(e), file=sys.stderr)
        return 1
    _print_result(result, as_json=bool(ns.json))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
