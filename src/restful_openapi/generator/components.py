"""Component schemas: JSON:API envelopes, enums, type defs and entities."""

import logging
from typing import Literal

from restful_openapi.generator.types import Schema, TypeMapper, all_of, array_of, ref
from restful_openapi.model.base import Entity, EnumDef, ModelGraph, TypeDef

logger = logging.getLogger(__name__)

Mode = Literal["read", "create", "update"]


def shared_parameters() -> dict[str, Schema]:
    """Reusable query/path parameters referenced from operations."""
    return {
        "id": {
            "name": "id",
            "in": "path",
            "description": "The resource id",
            "required": True,
            "schema": {"type": "string"},
        },
        "include": {
            "name": "include",
            "in": "query",
            "description": "Relationships to include",
            "required": False,
            "style": "form",
            "schema": {"type": "string"},
        },
        "sort": {
            "name": "sort",
            "in": "query",
            "description": "Fields to sort by",
            "required": False,
            "style": "form",
            "schema": {"type": "string"},
        },
        "page-offset": {
            "name": "page[offset]",
            "in": "query",
            "description": "Offset for pagination",
            "required": False,
            "style": "form",
            "schema": {"type": "integer"},
        },
        "page-limit": {
            "name": "page[limit]",
            "in": "query",
            "description": "Limit for pagination",
            "required": False,
            "style": "form",
            "schema": {"type": "integer"},
        },
    }


class ComponentSchemaBuilder:
    """Builds every named schema a document may reference."""

    def __init__(self, graph: ModelGraph, mapper: TypeMapper):
        self.graph = graph
        self.mapper = mapper

    def build(self) -> dict[str, Schema]:
        schemas: dict[str, Schema] = dict(self.shared_schemas())

        for enum in self.graph.enums:
            schemas[enum.name] = self.enum_schema(enum)

        for entity in self.graph.entities:
            schemas.update(self.entity_schemas(entity))

        for typedef in self.graph.typedefs:
            schemas[typedef.name] = self.typedef_schema(typedef)

        logger.debug("Built %d component schemas", len(schemas))
        return schemas

    def shared_schemas(self) -> dict[str, Schema]:
        nullable = self.mapper.nullable
        return {
            "_jsonapi": {
                "type": "object",
                "description": "An object describing the server's implementation",
                "required": ["version"],
                "properties": {"version": {"type": "string"}},
            },
            "_meta": {
                "type": "object",
                "description": "Meta information about the request or response",
                "properties": {
                    "serialization": {"description": "Serialization metadata"},
                },
                "additionalProperties": True,
            },
            "_resourceIdentifier": {
                "type": "object",
                "description": "Identifier for a resource",
                "required": ["type", "id"],
                "properties": {
                    "type": {"type": "string", "description": "Resource type"},
                    "id": {"type": "string", "description": "Resource id"},
                },
            },
            "_resource": all_of(
                ref("_resourceIdentifier"),
                {
                    "type": "object",
                    "description": "A resource with attributes and relationships",
                    "properties": {
                        "attributes": {"type": "object", "description": "Resource attributes"},
                        "relationships": {"type": "object", "description": "Resource relationships"},
                    },
                },
            ),
            "_links": {
                "type": "object",
                "required": ["self"],
                "description": "Links related to the resource",
                "properties": {"self": {"type": "string", "description": "Link for refetching the current results"}},
            },
            "_pagination": {
                "type": "object",
                "description": "Pagination information",
                "required": ["first", "last", "prev", "next"],
                "properties": {
                    "first": nullable({"type": "string", "description": "Link to the first page"}, True),
                    "last": nullable({"type": "string", "description": "Link to the last page"}, True),
                    "prev": nullable({"type": "string", "description": "Link to the previous page"}, True),
                    "next": nullable({"type": "string", "description": "Link to the next page"}, True),
                },
            },
            "_errors": {
                "type": "array",
                "description": "An array of error objects",
                "items": {
                    "type": "object",
                    "required": ["status", "code"],
                    "properties": {
                        "status": {"type": "string", "description": "HTTP status"},
                        "code": {"type": "string", "description": "Error code"},
                        "providerCode": {
                            "type": "string",
                            "description": "Error code reported by the storage provider, if any",
                        },
                        "title": {"type": "string", "description": "Error title"},
                        "detail": {"type": "string", "description": "Error detail"},
                        "reason": {"type": "string", "description": "Detailed error reason"},
                        "validationErrors": {
                            "type": "object",
                            "additionalProperties": True,
                            "description": "Field validation errors if the error is due to data validation failure",
                        },
                    },
                },
            },
            "_errorResponse": {
                "type": "object",
                "required": ["errors"],
                "description": "An error response",
                "properties": {
                    "jsonapi": ref("_jsonapi"),
                    "errors": ref("_errors"),
                },
            },
            "_relationLinks": {
                "type": "object",
                "required": ["self", "related"],
                "description": "Links related to a relationship",
                "properties": {
                    "self": {"type": "string", "description": "Link for fetching this relationship"},
                    "related": {
                        "type": "string",
                        "description": "Link for fetching the resource represented by this relationship",
                    },
                },
            },
            "_toOneRelationship": {
                "type": "object",
                "description": "A to-one relationship",
                "properties": {"data": nullable(ref("_resourceIdentifier"), True)},
            },
            "_toOneRelationshipWithLinks": {
                "type": "object",
                "required": ["links", "data"],
                "description": "A to-one relationship with links",
                "properties": {
                    "links": ref("_relationLinks"),
                    "data": nullable(ref("_resourceIdentifier"), True),
                },
            },
            "_toManyRelationship": {
                "type": "object",
                "required": ["data"],
                "description": "A to-many relationship",
                "properties": {"data": array_of(ref("_resourceIdentifier"))},
            },
            "_toManyRelationshipWithLinks": {
                "type": "object",
                "required": ["links", "data"],
                "description": "A to-many relationship with links",
                "properties": {
                    "links": ref("_pagedRelationLinks"),
                    "data": array_of(ref("_resourceIdentifier")),
                },
            },
            "_pagedRelationLinks": {
                "description": "Relationship links with pagination information",
                **all_of(ref("_pagination"), ref("_relationLinks")),
            },
            "_toManyRelationshipRequest": {
                "type": "object",
                "required": ["data"],
                "description": "Input for manipulating a to-many relationship",
                "properties": {"data": array_of(ref("_resourceIdentifier"))},
            },
            "_toOneRelationshipRequest": {
                "description": "Input for manipulating a to-one relationship",
                **nullable(
                    {
                        "type": "object",
                        "required": ["data"],
                        "properties": {"data": ref("_resourceIdentifier")},
                    },
                    True,
                ),
            },
            "_toManyRelationshipResponse": {
                "description": "Response for a to-many relationship",
                **all_of(
                    ref("_toManyRelationshipWithLinks"),
                    {"type": "object", "properties": {"jsonapi": ref("_jsonapi")}},
                ),
            },
            "_toOneRelationshipResponse": {
                "description": "Response for a to-one relationship",
                **all_of(
                    ref("_toOneRelationshipWithLinks"),
                    {"type": "object", "properties": {"jsonapi": ref("_jsonapi")}},
                ),
            },
        }

    def enum_schema(self, enum: EnumDef) -> Schema:
        return {
            "type": "string",
            "description": f'The "{enum.name}" Enum',
            "enum": list(enum.members),
        }

    def typedef_schema(self, typedef: TypeDef) -> Schema:
        return {
            "type": "object",
            "description": f'The "{typedef.name}" TypeDef',
            "properties": {field.name: self.mapper.field_schema(field, typedef.name) for field in typedef.fields},
        }

    def entity_schemas(self, entity: Entity) -> dict[str, Schema]:
        """The entity schema plus its request and response envelopes."""
        name = entity.name
        logger.debug("Generating schemas for %s", name)
        return {
            name: self.entity_schema(entity, "read"),
            f"{name}CreateRequest": {
                "type": "object",
                "description": f'Input for creating a "{name}"',
                "required": ["data"],
                "properties": {
                    "data": self.entity_schema(entity, "create"),
                    "meta": ref("_meta"),
                },
            },
            f"{name}UpdateRequest": {
                "type": "object",
                "description": f'Input for updating a "{name}"',
                "required": ["data"],
                "properties": {
                    "data": self.entity_schema(entity, "update"),
                    "meta": ref("_meta"),
                },
            },
            f"{name}Response": {
                "type": "object",
                "description": f'Response for a "{name}"',
                "required": ["data"],
                "properties": {
                    "jsonapi": ref("_jsonapi"),
                    "data": self._resource_data(entity),
                    "meta": ref("_meta"),
                    "included": array_of(ref("_resource")),
                    "links": ref("_links"),
                },
            },
            f"{name}ListResponse": {
                "type": "object",
                "description": f'Response for a list of "{name}"',
                "required": ["data", "links"],
                "properties": {
                    "jsonapi": ref("_jsonapi"),
                    "data": array_of(self._resource_data(entity)),
                    "meta": ref("_meta"),
                    "included": array_of(ref("_resource")),
                    "links": all_of(ref("_links"), ref("_pagination")),
                },
            },
        }

    def _resource_data(self, entity: Entity) -> Schema:
        relationships = {
            field.name: ref("_toManyRelationship" if field.array else "_toOneRelationship")
            for field in entity.fields
            if self.graph.is_relationship(field)
        }
        return all_of(
            ref(entity.name),
            {"type": "object", "properties": {"relationships": {"type": "object", "properties": relationships}}},
        )

    def entity_schema(self, entity: Entity, mode: Mode) -> Schema:
        """The JSON:API resource object for an entity in the given mode."""
        id_fields = entity.id_fields
        # compound id components are exposed as ordinary attributes
        fields = entity.fields if len(id_fields) > 1 else [f for f in entity.fields if not f.is_id]

        attributes: dict[str, Schema] = {}
        relationships: dict[str, Schema] = {}
        required: list[str] = []

        for field in fields:
            if field.foreign_key and mode != "read":
                continue
            if self.graph.is_relationship(field):
                if mode == "read":
                    rel_type = "_toManyRelationshipWithLinks" if field.array else "_toOneRelationshipWithLinks"
                else:
                    rel_type = "_toManyRelationship" if field.array else "_toOneRelationship"
                relationships[field.name] = self.mapper.nullable(ref(rel_type), field.optional)
                continue

            attributes[field.name] = self.mapper.field_schema(field, entity.name)
            if mode == "create" and not field.optional and not field.has_default:
                required.append(field.name)
            elif mode == "read":
                # no sparse fieldsets, so reads always return every attribute
                required.append(field.name)

        attributes_schema: Schema = {"type": "object"}
        if required:
            attributes_schema["required"] = required
        attributes_schema["properties"] = attributes

        id_schema: Schema = {"type": "string"}
        if len(id_fields) == 1:
            id_schema = self.mapper.base_schema(id_fields[0], entity.name)

        toplevel_required = ["type", "attributes"]
        if mode != "create" or (len(id_fields) == 1 and not id_fields[0].has_default):
            toplevel_required.insert(0, "id")

        properties: dict[str, Schema] = {
            "id": id_schema,
            "type": {"type": "string"},
            "attributes": attributes_schema,
        }
        if relationships:
            properties["relationships"] = {"type": "object", "properties": relationships}

        return {
            "type": "object",
            "description": f'The "{entity.name}" model',
            "required": toplevel_required,
            "properties": properties,
        }
