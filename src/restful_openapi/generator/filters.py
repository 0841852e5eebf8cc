"""Filter query parameters derived from entity fields."""

from restful_openapi.generator.types import Schema, TypeMapper, ref, wrap_array
from restful_openapi.model.base import Entity, EntityField, EnumDef, ModelGraph, PrimitiveKind, TypeDef

ORDERED_KINDS = {
    PrimitiveKind.INT,
    PrimitiveKind.BIGINT,
    PrimitiveKind.FLOAT,
    PrimitiveKind.DECIMAL,
    PrimitiveKind.DATETIME,
}

COMPARISON_FILTERS = [
    ("$lt", "Less-than filter"),
    ("$lte", "Less-than or equal filter"),
    ("$gt", "Greater-than filter"),
    ("$gte", "Greater-than or equal filter"),
]

STRING_FILTERS = [
    ("$contains", "String contains filter"),
    ("$icontains", "String case-insensitive contains filter"),
    ("$search", "String full-text search filter"),
    ("$startsWith", "String startsWith filter"),
    ("$endsWith", "String endsWith filter"),
]


class FilterParameterBuilder:
    """Builds ``filter[...]`` query parameters for an entity."""

    def __init__(self, graph: ModelGraph, mapper: TypeMapper):
        self.graph = graph
        self.mapper = mapper

    def build(self, entity: Entity) -> list[Schema]:
        result: list[Schema] = []
        has_multiple_ids = len(entity.id_fields) > 1

        for field in entity.fields:
            if field.foreign_key:
                # filter through the relationship name instead
                continue

            if field.is_id and not has_multiple_ids:
                result.append(self._parameter(entity, field, "id", "Id filter"))
                continue

            result.append(self._parameter(entity, field, "", "Equality filter", field.array))

            if self.graph.is_relationship(field):
                # nested relationship filters are not supported
                continue

            if field.array:
                result.append(self._parameter(entity, field, "$has", "Collection contains filter"))
                result.append(self._parameter(entity, field, "$hasEvery", "Collection contains-all filter", True))
                result.append(self._parameter(entity, field, "$hasSome", "Collection contains-any filter", True))
                result.append(
                    self._parameter(entity, field, "$isEmpty", "Collection is empty filter", schema={"type": "boolean"})
                )
                continue

            if field.primitive in ORDERED_KINDS:
                for op, description in COMPARISON_FILTERS:
                    result.append(self._parameter(entity, field, op, description))
            if field.primitive == PrimitiveKind.STRING:
                for op, description in STRING_FILTERS:
                    result.append(self._parameter(entity, field, op, description))

        return result

    def _value_schema(self, entity: Entity, field: EntityField) -> Schema:
        if field.primitive == PrimitiveKind.JSON:
            return {"type": "string", "format": "json"}
        if field.primitive is not None:
            return self.mapper.base_schema(field, owner=entity.name)
        decl = self.graph.resolve(field.type, owner=f"{entity.name}.{field.name}")
        if isinstance(decl, EnumDef):
            return ref(decl.name)
        if isinstance(decl, TypeDef):
            return {"type": "string", "format": "json"}
        return {"type": "string"}

    def _parameter(
        self,
        entity: Entity,
        field: EntityField,
        op: str,
        description: str,
        array: bool = False,
        schema: Schema | None = None,
    ) -> Schema:
        value_schema = schema if schema is not None else self._value_schema(entity, field)
        if op == "id":
            name = "filter[id]"
        else:
            name = f"filter[{field.name}{op}]"
            description = f'{description} for "{field.name}"'
        return {
            "name": name,
            "required": False,
            "description": description,
            "in": "query",
            "style": "form",
            "explode": False,
            "schema": wrap_array(value_schema, array),
        }
