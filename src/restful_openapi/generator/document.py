"""OpenAPI document assembly for the RESTful (JSON:API) flavor."""

import logging
from typing import Any

from pydantic import BaseModel

from restful_openapi.config import GeneratorOptions, parse_security_schemes
from restful_openapi.generator.components import ComponentSchemaBuilder, shared_parameters
from restful_openapi.generator.filters import FilterParameterBuilder
from restful_openapi.generator.paths import PathBuilder, PolicyAnalyzer, lower_case_first
from restful_openapi.generator.pruning import prune_components
from restful_openapi.generator.types import TypeMapper
from restful_openapi.model.base import Entity, ModelGraph
from restful_openapi.model.policy import analyze_policies

logger = logging.getLogger(__name__)


class GenerationResult(BaseModel):
    document: dict[str, Any]
    warnings: list[str] = []


class RestfulOpenAPIGenerator:
    """Generates a JSON:API flavored OpenAPI document from a model graph."""

    def __init__(
        self,
        graph: ModelGraph,
        options: GeneratorOptions,
        analyze: PolicyAnalyzer = analyze_policies,
    ):
        self.graph = graph
        self.options = options
        self.analyze = analyze
        self.warnings: list[str] = []

        self.mapper = TypeMapper(graph, nullable_as_type=options.nullable_as_type)
        self.components = ComponentSchemaBuilder(graph, self.mapper)
        self.filters = FilterParameterBuilder(graph, self.mapper)

    def included_entities(self) -> list[Entity]:
        """Non-ignored entities, optionally narrowed by the ``include`` option."""
        entities = [e for e in self.graph.entities if not e.ignored]
        if self.options.include is None:
            return entities

        for name in self.options.include:
            if self.graph.entity(name) is None:
                message = f"Unable to load model definition for: {name}"
                logger.warning(message)
                self.warnings.append(message)
        wanted = set(self.options.include)
        return [e for e in entities if e.name in wanted]

    def generate(self) -> GenerationResult:
        self.warnings = []
        security_schemes = parse_security_schemes(self.options.security_schemes)
        included = self.included_entities()

        schemas = self.components.build()
        path_builder = PathBuilder(
            self.filters,
            self.analyze,
            included={e.name: e for e in included},
            prefix=self.options.prefix,
            name_mapping=self.options.model_name_mapping,
        )
        paths: dict[str, Any] = {}
        for entity in included:
            paths.update(path_builder.build(entity))

        components: dict[str, Any] = {
            "schemas": prune_components(paths, schemas),
            "parameters": shared_parameters(),
        }

        security = None
        if security_schemes is not None:
            components["securitySchemes"] = security_schemes
            if security_schemes:
                security = [{name: []} for name in security_schemes]

        document: dict[str, Any] = {
            "openapi": self.options.spec_version,
            "info": self._info(),
            "tags": [self._tag(e) for e in included],
            "paths": paths,
            "components": components,
        }
        if security is not None:
            document["security"] = security

        logger.debug("Generated %d paths and %d schemas", len(paths), len(components["schemas"]))
        return GenerationResult(document=document, warnings=list(self.warnings))

    def _info(self) -> dict[str, Any]:
        info = {
            "title": self.options.title,
            "version": self.options.version,
            "description": self.options.description,
            "summary": self.options.summary,
        }
        return {k: v for k, v in info.items() if v is not None}

    def _tag(self, entity: Entity) -> dict[str, str]:
        description = None
        if entity.meta is not None:
            description = entity.meta.tag_description
        return {
            "name": lower_case_first(entity.name),
            "description": f"{entity.name} operations" if description is None else description,
        }


def generate_document(
    graph: ModelGraph,
    options: GeneratorOptions,
    analyze: PolicyAnalyzer = analyze_policies,
) -> GenerationResult:
    return RestfulOpenAPIGenerator(graph, options, analyze).generate()
