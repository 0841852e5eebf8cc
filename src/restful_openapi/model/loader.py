"""Model definition loader.

Reads YAML or JSON model definition files into a ModelGraph. Field types
accept a compact suffix notation: ``Post[]`` for arrays and ``String?``
for optional fields.
"""

import logging
from pathlib import Path

import yaml
from pydantic import ValidationError

from restful_openapi.errors import ConfigurationError
from restful_openapi.model.base import Entity, EntityField, EnumDef, ModelGraph, TypeDef

logger = logging.getLogger(__name__)


def load_model(file_path: Path) -> ModelGraph:
    """Load a model definition file and check that every reference resolves."""
    text = file_path.read_text(encoding="utf-8")
    try:
        doc = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Cannot parse model file {file_path}: {e}") from e
    if not isinstance(doc, dict):
        raise ConfigurationError(f"Model file {file_path} must contain a mapping")

    graph = parse_model(doc)
    validate_references(graph)
    logger.debug(
        "Loaded %d entities, %d enums, %d type defs from %s",
        len(graph.entities), len(graph.enums), len(graph.typedefs), file_path,
    )
    return graph


def parse_model(doc: dict) -> ModelGraph:
    """Build a ModelGraph from an already-parsed model definition mapping."""
    try:
        enums = [
            EnumDef(name=name, members=list(members or []))
            for name, members in (doc.get("enums") or {}).items()
        ]
        typedefs = [
            TypeDef(name=name, fields=_parse_fields((body or {}).get("fields")))
            for name, body in (doc.get("typedefs") or {}).items()
        ]
        entities = [_parse_entity(name, body or {}) for name, body in (doc.get("entities") or {}).items()]
    except ValidationError as e:
        raise ConfigurationError(f"Invalid model definition: {e}") from e
    return ModelGraph(entities=entities, enums=enums, typedefs=typedefs)


def validate_references(graph: ModelGraph) -> None:
    """Raise ResolutionError for the first field type that names nothing."""
    for decl in [*graph.entities, *graph.typedefs]:
        for field in decl.fields:
            if field.primitive is None:
                graph.resolve(field.type, owner=f"{decl.name}.{field.name}")


def _parse_entity(name: str, body: dict) -> Entity:
    return Entity(
        name=name,
        fields=_parse_fields(body.get("fields")),
        ignored=bool(body.get("ignore", False)),
        meta=body.get("meta"),
        access=body.get("access") or [],
    )


def _parse_fields(fields: list[dict] | None) -> list[EntityField]:
    return [_parse_field(f) for f in fields or []]


def _parse_field(data: dict) -> EntityField:
    data = dict(data)
    type_name = str(data.get("type", ""))
    # suffixes may come in either order: Post[]? or Post?[]
    while type_name.endswith(("?", "[]")):
        if type_name.endswith("?"):
            type_name = type_name[:-1]
            data.setdefault("optional", True)
        else:
            type_name = type_name[:-2]
            data.setdefault("array", True)
    data["type"] = type_name
    return EntityField(**data)
