"""Field type mapping and schema composition helpers.

Schema fragments are plain OpenAPI dicts. The helpers here always return
new dicts and never modify their arguments, so fragments can be shared
between components safely.
"""

from typing import Any, Callable

from restful_openapi.model.base import EntityField, ModelGraph, PrimitiveKind

Schema = dict[str, Any]

SCHEMA_REF_PREFIX = "#/components/schemas/"
PARAMETER_REF_PREFIX = "#/components/parameters/"

PRIMITIVE_SCHEMAS: dict[PrimitiveKind, Callable[[], Schema]] = {
    PrimitiveKind.STRING: lambda: {"type": "string"},
    PrimitiveKind.INT: lambda: {"type": "integer"},
    PrimitiveKind.BIGINT: lambda: {"type": "integer"},
    PrimitiveKind.FLOAT: lambda: {"type": "number"},
    PrimitiveKind.DECIMAL: lambda: one_of({"type": "number"}, {"type": "string"}),
    PrimitiveKind.BOOLEAN: lambda: {"type": "boolean"},
    PrimitiveKind.DATETIME: lambda: {"type": "string", "format": "date-time"},
    PrimitiveKind.BYTES: lambda: {"type": "string", "format": "byte", "description": "Base64 encoded byte array"},
    PrimitiveKind.JSON: lambda: {},
}


def ref(name: str) -> Schema:
    return {"$ref": f"{SCHEMA_REF_PREFIX}{name}"}


def parameter_ref(name: str) -> Schema:
    return {"$ref": f"{PARAMETER_REF_PREFIX}{name}"}


def all_of(*schemas: Schema) -> Schema:
    return {"allOf": list(schemas)}


def one_of(*schemas: Schema) -> Schema:
    return {"oneOf": list(schemas)}


def array_of(items: Schema) -> Schema:
    return {"type": "array", "items": items}


def wrap_array(schema: Schema, is_array: bool) -> Schema:
    return array_of(schema) if is_array else schema


def wrap_nullable(schema: Schema, is_optional: bool, nullable_as_type: bool) -> Schema:
    """Allow null for an optional schema in the style of the target OpenAPI version."""
    if not is_optional:
        return schema
    if nullable_as_type:
        return one_of(schema, {"type": "null"})
    if "$ref" in schema:
        # siblings of $ref are ignored before 3.1
        return {"allOf": [schema], "nullable": True}
    return {**schema, "nullable": True}


class TypeMapper:
    """Maps declared field types to OpenAPI schemas."""

    def __init__(self, graph: ModelGraph, nullable_as_type: bool = False):
        self.graph = graph
        self.nullable_as_type = nullable_as_type

    def base_schema(self, field: EntityField, owner: str | None = None) -> Schema:
        """Schema for the field's type alone, ignoring optionality and cardinality.

        ``owner`` names the declaring entity or type def in resolution errors.
        """
        kind = field.primitive
        if kind is not None:
            return PRIMITIVE_SCHEMAS[kind]()
        decl = self.graph.resolve(field.type, owner=f"{owner}.{field.name}" if owner else field.name)
        return ref(decl.name)

    def field_schema(self, field: EntityField, owner: str | None = None) -> Schema:
        return wrap_array(self.nullable(self.base_schema(field, owner), field.optional), field.array)

    def nullable(self, schema: Schema, is_optional: bool) -> Schema:
        return wrap_nullable(schema, is_optional, self.nullable_as_type)
