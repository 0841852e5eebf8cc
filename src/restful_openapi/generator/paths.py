"""Path items for collection, item, related and relationship resources.

Operation ids follow ``<verb>-<Entity>[-relationship-<field>][-put|-patch]``,
which keeps them unique across the whole document.
"""

import logging
from typing import Any, Callable

from restful_openapi.generator.filters import FilterParameterBuilder
from restful_openapi.generator.types import Schema, parameter_ref, ref
from restful_openapi.model.base import Entity, EntityField, PolicyResult, ResourceMeta

logger = logging.getLogger(__name__)

CONTENT_TYPE = "application/vnd.api+json"

PolicyAnalyzer = Callable[[Entity], PolicyResult]


def lower_case_first(name: str) -> str:
    return name[:1].lower() + name[1:]


def operation_security(meta: ResourceMeta | None, allowed: bool) -> list | None:
    """``[]`` opens an operation; None leaves the document-level requirement."""
    # any resource-level override opens the operation, whatever its value
    if (meta is not None and meta.security is not None) or allowed:
        return []
    return None


def _compact(values: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in values.items() if v is not None}


def _body(schema_name: str) -> Schema:
    return {"content": {CONTENT_TYPE: {"schema": ref(schema_name)}}}


def _error(description: str) -> Schema:
    return {"description": description, "content": {CONTENT_TYPE: {"schema": ref("_errorResponse")}}}


def success(schema_name: str | None = None) -> Schema:
    response: Schema = {"description": "Successful operation"}
    if schema_name:
        response["content"] = {CONTENT_TYPE: {"schema": ref(schema_name)}}
    return response


def forbidden() -> Schema:
    return _error("Request is forbidden")


def not_found() -> Schema:
    return _error("Resource is not found")


def validation_error() -> Schema:
    return _error("Request is unprocessable due to validation errors")


class PathBuilder:
    """Emits every path item for one entity."""

    def __init__(
        self,
        filters: FilterParameterBuilder,
        analyze: PolicyAnalyzer,
        included: dict[str, Entity],
        prefix: str = "",
        name_mapping: dict[str, str] | None = None,
    ):
        self.filters = filters
        self.analyze = analyze
        self.included = included
        self.prefix = prefix
        self.name_mapping = name_mapping or {}

    @property
    def graph(self):
        return self.filters.graph

    def resource_path(self, entity: Entity) -> str:
        return f"{self.prefix}/{lower_case_first(self.name_mapping.get(entity.name, entity.name))}"

    def build(self, entity: Entity) -> dict[str, Schema]:
        policies = self.analyze(entity)
        meta = entity.meta
        base = self.resource_path(entity)
        name = entity.name
        mapped = self.name_mapping.get(name, name)

        result: dict[str, Schema] = {
            base: {
                "get": self.list_operation(entity, policies, meta),
                "post": self.create_operation(entity, policies, meta),
            },
            f"{base}/{{id}}": {
                "get": self.fetch_operation(entity, policies, meta),
                "put": self.update_operation(entity, policies, f"update-{mapped}-put", meta),
                "patch": self.update_operation(entity, policies, f"update-{mapped}-patch", meta),
                "delete": self.delete_operation(entity, policies, meta),
            },
        }

        for field in entity.fields:
            if not self.graph.is_relationship(field):
                continue
            related = self.included.get(field.type)
            if related is None:
                logger.debug("Skipping relationship %s.%s to excluded entity %s", name, field.name, field.type)
                continue

            result[f"{base}/{{id}}/{field.name}"] = {
                "get": self.related_fetch_operation(entity, field, related, meta),
            }

            container: dict[str, Schema] = {
                "get": self.relationship_fetch_operation(entity, field, related, policies, meta),
                "put": self.relationship_update_operation(
                    entity, field, policies, f"update-{name}-relationship-{field.name}-put", meta
                ),
                "patch": self.relationship_update_operation(
                    entity, field, policies, f"update-{name}-relationship-{field.name}-patch", meta
                ),
            }
            if field.array:
                # to-one relationships have no "add" operation
                container["post"] = self.relationship_create_operation(entity, field, policies, meta)
            result[f"{base}/{{id}}/relationships/{field.name}"] = container

        logger.debug("Generated %d paths for %s", len(result), name)
        return result

    def _collection_parameters(self, entity: Entity) -> list[Schema]:
        return [
            parameter_ref("sort"),
            parameter_ref("page-offset"),
            parameter_ref("page-limit"),
            *self.filters.build(entity),
        ]

    def list_operation(self, entity: Entity, policies: PolicyResult, meta: ResourceMeta | None) -> Schema:
        return _compact({
            "operationId": f"list-{entity.name}",
            "description": f'List "{entity.name}" resources',
            "tags": [lower_case_first(entity.name)],
            "parameters": [parameter_ref("include"), *self._collection_parameters(entity)],
            "responses": {
                "200": success(f"{entity.name}ListResponse"),
                "403": forbidden(),
            },
            "security": operation_security(meta, policies.read),
        })

    def create_operation(self, entity: Entity, policies: PolicyResult, meta: ResourceMeta | None) -> Schema:
        return _compact({
            "operationId": f"create-{entity.name}",
            "description": f'Create a "{entity.name}" resource',
            "tags": [lower_case_first(entity.name)],
            "requestBody": _body(f"{entity.name}CreateRequest"),
            "responses": {
                "201": success(f"{entity.name}Response"),
                "403": forbidden(),
                "422": validation_error(),
            },
            "security": operation_security(meta, policies.create),
        })

    def fetch_operation(self, entity: Entity, policies: PolicyResult, meta: ResourceMeta | None) -> Schema:
        return _compact({
            "operationId": f"fetch-{entity.name}",
            "description": f'Fetch a "{entity.name}" resource',
            "tags": [lower_case_first(entity.name)],
            "parameters": [parameter_ref("id"), parameter_ref("include")],
            "responses": {
                "200": success(f"{entity.name}Response"),
                "403": forbidden(),
                "404": not_found(),
            },
            "security": operation_security(meta, policies.read),
        })

    def update_operation(
        self, entity: Entity, policies: PolicyResult, operation_id: str, meta: ResourceMeta | None
    ) -> Schema:
        return _compact({
            "operationId": operation_id,
            "description": f'Update a "{entity.name}" resource',
            "tags": [lower_case_first(entity.name)],
            "parameters": [parameter_ref("id")],
            "requestBody": _body(f"{entity.name}UpdateRequest"),
            "responses": {
                "200": success(f"{entity.name}Response"),
                "403": forbidden(),
                "404": not_found(),
                "422": validation_error(),
            },
            "security": operation_security(meta, policies.update),
        })

    def delete_operation(self, entity: Entity, policies: PolicyResult, meta: ResourceMeta | None) -> Schema:
        return _compact({
            "operationId": f"delete-{entity.name}",
            "description": f'Delete a "{entity.name}" resource',
            "tags": [lower_case_first(entity.name)],
            "parameters": [parameter_ref("id")],
            "responses": {
                "200": success(),
                "403": forbidden(),
                "404": not_found(),
            },
            "security": operation_security(meta, policies.delete),
        })

    def related_fetch_operation(
        self, entity: Entity, field: EntityField, related: Entity, meta: ResourceMeta | None
    ) -> Schema:
        related_policies = self.analyze(related)
        parameters = [parameter_ref("id"), parameter_ref("include")]
        if field.array:
            parameters.extend(self._collection_parameters(related))
        return _compact({
            "operationId": f"fetch-{entity.name}-related-{field.name}",
            "description": f'Fetch the related "{field.name}" resource for "{entity.name}"',
            "tags": [lower_case_first(entity.name)],
            "parameters": parameters,
            "responses": {
                "200": success(f"{related.name}ListResponse" if field.array else f"{related.name}Response"),
                "403": forbidden(),
                "404": not_found(),
            },
            "security": operation_security(meta, related_policies.read),
        })

    def relationship_fetch_operation(
        self,
        entity: Entity,
        field: EntityField,
        related: Entity,
        policies: PolicyResult,
        meta: ResourceMeta | None,
    ) -> Schema:
        parameters = [parameter_ref("id")]
        if field.array:
            parameters.extend(self._collection_parameters(related))
        return _compact({
            "operationId": f"fetch-{entity.name}-relationship-{field.name}",
            "description": f'Fetch the "{field.name}" relationships for a "{entity.name}"',
            "tags": [lower_case_first(entity.name)],
            "parameters": parameters,
            "responses": {
                "200": success("_toManyRelationshipResponse" if field.array else "_toOneRelationshipResponse"),
                "403": forbidden(),
                "404": not_found(),
            },
            "security": operation_security(meta, policies.read),
        })

    def relationship_create_operation(
        self, entity: Entity, field: EntityField, policies: PolicyResult, meta: ResourceMeta | None
    ) -> Schema:
        return _compact({
            "operationId": f"create-{entity.name}-relationship-{field.name}",
            "description": f'Create new "{field.name}" relationships for a "{entity.name}"',
            "tags": [lower_case_first(entity.name)],
            "parameters": [parameter_ref("id")],
            "requestBody": _body("_toManyRelationshipRequest"),
            "responses": {
                "200": success("_toManyRelationshipResponse"),
                "403": forbidden(),
                "404": not_found(),
            },
            "security": operation_security(meta, policies.update),
        })

    def relationship_update_operation(
        self,
        entity: Entity,
        field: EntityField,
        policies: PolicyResult,
        operation_id: str,
        meta: ResourceMeta | None,
    ) -> Schema:
        noun = "relationships" if field.array else "relationship"
        return _compact({
            "operationId": operation_id,
            "description": f'Update "{field.name}" {noun} for a "{entity.name}"',
            "tags": [lower_case_first(entity.name)],
            "parameters": [parameter_ref("id")],
            "requestBody": _body("_toManyRelationshipRequest" if field.array else "_toOneRelationshipRequest"),
            "responses": {
                "200": success("_toManyRelationshipResponse" if field.array else "_toOneRelationshipResponse"),
                "403": forbidden(),
                "404": not_found(),
            },
            "security": operation_security(meta, policies.update),
        })
