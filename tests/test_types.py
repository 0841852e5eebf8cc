import pytest

from restful_openapi.errors import ConfigurationError, ResolutionError
from restful_openapi.generator.types import (
    PRIMITIVE_SCHEMAS,
    TypeMapper,
    all_of,
    array_of,
    one_of,
    ref,
    wrap_array,
    wrap_nullable,
)
from restful_openapi.model.base import Entity, EntityField, EnumDef, ModelGraph, PrimitiveKind, TypeDef


def _graph() -> ModelGraph:
    return ModelGraph(
        entities=[Entity(name="User", fields=[EntityField(name="id", type="String", is_id=True)])],
        enums=[EnumDef(name="Role", members=["USER"])],
        typedefs=[TypeDef(name="Meta", fields=[EntityField(name="something", type="String")])],
    )


def _field(type_: str, **kwargs) -> EntityField:
    return EntityField(name="f", type=type_, **kwargs)


class TestPrimitiveSchemas:
    def test_every_kind_is_mapped(self):
        assert set(PRIMITIVE_SCHEMAS) == set(PrimitiveKind)

    @pytest.mark.parametrize("kind, expected", [
        ("String", {"type": "string"}),
        ("Int", {"type": "integer"}),
        ("BigInt", {"type": "integer"}),
        ("Float", {"type": "number"}),
        ("Decimal", {"oneOf": [{"type": "number"}, {"type": "string"}]}),
        ("Boolean", {"type": "boolean"}),
        ("DateTime", {"type": "string", "format": "date-time"}),
        ("Json", {}),
    ])
    def test_base_schema(self, kind, expected):
        assert TypeMapper(_graph()).base_schema(_field(kind)) == expected

    def test_bytes_is_base64_string(self):
        schema = TypeMapper(_graph()).base_schema(_field("Bytes"))
        assert schema["type"] == "string"
        assert schema["format"] == "byte"

    def test_fresh_dict_each_call(self):
        mapper = TypeMapper(_graph())
        assert mapper.base_schema(_field("String")) is not mapper.base_schema(_field("String"))


class TestReferences:
    def test_enum_entity_and_typedef_refs(self):
        mapper = TypeMapper(_graph())
        assert mapper.base_schema(_field("Role")) == {"$ref": "#/components/schemas/Role"}
        assert mapper.base_schema(_field("User")) == {"$ref": "#/components/schemas/User"}
        assert mapper.base_schema(_field("Meta")) == {"$ref": "#/components/schemas/Meta"}

    def test_unknown_reference(self):
        with pytest.raises(ResolutionError):
            TypeMapper(_graph()).base_schema(_field("Nope"))

    def test_unknown_reference_is_configuration_error(self):
        with pytest.raises(ConfigurationError):
            TypeMapper(_graph()).field_schema(_field("Nope"))


class TestFieldSchema:
    def test_optional_3_0(self):
        schema = TypeMapper(_graph()).field_schema(_field("String", optional=True))
        assert schema == {"type": "string", "nullable": True}

    def test_optional_ref_3_0(self):
        schema = TypeMapper(_graph()).field_schema(_field("Meta", optional=True))
        assert schema == {"allOf": [{"$ref": "#/components/schemas/Meta"}], "nullable": True}

    def test_optional_3_1(self):
        schema = TypeMapper(_graph(), nullable_as_type=True).field_schema(_field("String", optional=True))
        assert schema == {"oneOf": [{"type": "string"}, {"type": "null"}]}

    def test_array(self):
        schema = TypeMapper(_graph()).field_schema(_field("Int", array=True))
        assert schema == {"type": "array", "items": {"type": "integer"}}


class TestHelpers:
    def test_wrap_nullable_noop(self):
        schema = {"type": "string"}
        assert wrap_nullable(schema, False, True) is schema

    def test_wrap_nullable_does_not_mutate(self):
        schema = {"type": "string"}
        wrap_nullable(schema, True, False)
        assert schema == {"type": "string"}

    def test_wrap_array(self):
        assert wrap_array({"type": "string"}, False) == {"type": "string"}
        assert wrap_array({"type": "string"}, True) == array_of({"type": "string"})

    def test_compose(self):
        assert all_of(ref("A"), ref("B")) == {"allOf": [ref("A"), ref("B")]}
        assert one_of({"type": "number"}) == {"oneOf": [{"type": "number"}]}

    def test_unknown_reference_names_owner(self):
        with pytest.raises(ResolutionError) as exc:
            TypeMapper(_graph()).field_schema(EntityField(name="team", type="Team"), "User")
        assert '(in "User.team")' in str(exc.value)
