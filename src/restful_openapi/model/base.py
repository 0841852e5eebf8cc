"""Data model definitions consumed by the OpenAPI generator.

Loaders turn model definition files into these standard models; the
generator only ever reads them.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

from restful_openapi.errors import ResolutionError


class PrimitiveKind(str, Enum):
    """Built-in scalar field types."""

    STRING = "String"
    INT = "Int"
    BIGINT = "BigInt"
    FLOAT = "Float"
    DECIMAL = "Decimal"
    BOOLEAN = "Boolean"
    DATETIME = "DateTime"
    BYTES = "Bytes"
    JSON = "Json"


PRIMITIVE_NAMES = {kind.value for kind in PrimitiveKind}

OPERATIONS = ("create", "read", "update", "delete")


class EntityField(BaseModel):
    """A single field of an entity or type def."""

    model_config = ConfigDict(populate_by_name=True)

    name: str
    type: str  # primitive kind name or declaration name
    array: bool = False
    optional: bool = False
    is_id: bool = Field(False, alias="id")
    foreign_key: bool = False
    has_default: bool = Field(False, alias="default")

    @property
    def primitive(self) -> PrimitiveKind | None:
        if self.type in PRIMITIVE_NAMES:
            return PrimitiveKind(self.type)
        return None


class EnumDef(BaseModel):
    name: str
    members: list[str]


class TypeDef(BaseModel):
    """A structured scalar; its fields never form relationships."""

    name: str
    fields: list[EntityField] = []


class ResourceMeta(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    tag_description: str | None = Field(None, alias="tagDescription")
    security: list[dict] | dict | None = None


class AccessRule(BaseModel):
    """An allow/deny rule over one or more operations."""

    kind: str = "allow"  # allow / deny
    operations: list[str]
    condition: bool | str = True

    @field_validator("operations", mode="before")
    @classmethod
    def _split_operations(cls, value):
        if isinstance(value, str):
            return [op.strip() for op in value.split(",") if op.strip()]
        return value

    def covers(self, operation: str) -> bool:
        return operation in self.operations or "all" in self.operations


class Entity(BaseModel):
    """A modeled record type exposed as a JSON:API resource."""

    name: str
    fields: list[EntityField] = []
    ignored: bool = False
    meta: ResourceMeta | None = None
    access: list[AccessRule] = []

    @property
    def id_fields(self) -> list[EntityField]:
        return [f for f in self.fields if f.is_id]


class PolicyResult(BaseModel):
    """Per-operation flags; True only when access is unconditionally allowed."""

    create: bool = False
    read: bool = False
    update: bool = False
    delete: bool = False


class ModelGraph(BaseModel):
    """All declarations of a model, in declaration order."""

    entities: list[Entity] = []
    enums: list[EnumDef] = []
    typedefs: list[TypeDef] = []

    def entity(self, name: str) -> Entity | None:
        return next((e for e in self.entities if e.name == name), None)

    def resolve(self, type_name: str, owner: str | None = None) -> Entity | EnumDef | TypeDef:
        """Look up the declaration a non-primitive type name refers to."""
        for declarations in (self.entities, self.enums, self.typedefs):
            for decl in declarations:
                if decl.name == type_name:
                    return decl
        raise ResolutionError(type_name, owner)

    def is_relationship(self, field: EntityField) -> bool:
        return field.primitive is None and self.entity(field.type) is not None
