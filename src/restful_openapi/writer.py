"""Serialize generated documents as YAML or JSON."""

import json
from pathlib import Path
from typing import Any

import yaml

YAML_SUFFIXES = (".yaml", ".yml")


class _NoAliasDumper(yaml.SafeDumper):
    """Writes repeated fragments in full instead of as &anchors."""

    def ignore_aliases(self, data):
        return True


def is_yaml_path(path: Path) -> bool:
    return path.suffix.lower() in YAML_SUFFIXES


def render_document(document: dict[str, Any], as_yaml: bool) -> str:
    if as_yaml:
        return yaml.dump(
            document,
            Dumper=_NoAliasDumper,
            sort_keys=False,
            allow_unicode=True,
            default_flow_style=False,
        )
    return json.dumps(document, indent=2, ensure_ascii=False)


def write_document(document: dict[str, Any], output: Path) -> Path:
    """Write the document, picking the format from the file extension."""
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(render_document(document, is_yaml_path(output)), encoding="utf-8")
    return output
