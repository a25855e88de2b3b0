from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List

import jsonschema
import yaml

from incbak.core.errors import ConfigError
from incbak.resources import contract_schema_path

CONFIG_ENV_VAR = "INCBAK_CONFIG"
CONFIG_SCHEMA = "backup_config.schema.json"
TRACE_EVENT_SCHEMA = "trace_event.schema.json"


@lru_cache(maxsize=None)
def load_schema(schema_name: str) -> Dict[str, Any]:
    schema = json.loads(contract_schema_path(schema_name).read_text(encoding="utf-8"))
    jsonschema.Draft202012Validator.check_schema(schema)
    return schema


def validate_instance(schema_name: str, instance: Any) -> List[str]:
    """
    Validates an instance and returns a list of error strings (empty means valid).
    """
    validator = jsonschema.Draft202012Validator(load_schema(schema_name))
    return [e.message for e in sorted(validator.iter_errors(instance), key=str)]


def validate_config(instance: Any) -> List[str]:
    return validate_instance(CONFIG_SCHEMA, instance)


def validate_trace_file(path: Path) -> List[str]:
    errors: List[str] = []
    with path.open("r", encoding="utf-8") as f:
        for i, line in enumerate(f, start=1):
            line = line.strip()
            if not line:
                continue
            try:
                obj = json.loads(line)
            except ValueError as e:
                errors.append("line {}: invalid json: {}".format(i, repr(e)))
                continue
            for msg in validate_instance(TRACE_EVENT_SCHEMA, obj):
                errors.append("line {}: {}".format(i, msg))
    return errors


def load_config_file(path: Path) -> Dict[str, Any]:
    """
    Load a YAML backup config file.

    Keys (all optional): output, trace, run_id, chunk_size.
    An empty file is an empty config.
    """
    try:
        txt = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(
            code="config.not_found",
            message=f"Cannot read config file: {path}",
            data={"path": str(path), "error": repr(e)},
        ) from e
    try:
        data = yaml.safe_load(txt)
    except yaml.YAMLError as e:
        raise ConfigError(
            code="config.invalid",
            message=f"Config file is not valid YAML: {path}",
            data={"path": str(path), "error": repr(e)},
        ) from e
    if data is None:
        data = {}

    errors = validate_config(data)
    if errors:
        raise ConfigError(
            code="config.invalid",
            message=f"Config file does not validate against {CONFIG_SCHEMA}",
            data={"path": str(path), "errors": errors},
        )
    return dict(data)
