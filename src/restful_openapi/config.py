"""Generator options and security scheme validation."""

from pathlib import Path
from typing import Literal, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from restful_openapi.errors import ConfigurationError

DEFAULT_SPEC_VERSION = "3.0.0"
DEFAULT_TITLE = "Generated JSON:API"
DEFAULT_VERSION = "1.0.0"


class _Scheme(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")

    description: str | None = None


class HttpBasicScheme(_Scheme):
    type: Literal["http"]
    scheme: Literal["basic"]


class HttpBearerScheme(_Scheme):
    type: Literal["http"]
    scheme: Literal["bearer"]
    bearer_format: str | None = None


class ApiKeyScheme(_Scheme):
    type: Literal["apiKey"]
    location: Literal["header", "query", "cookie"] = Field(alias="in")
    name: str


class OAuthFlow(_Scheme):
    authorization_url: str | None = None
    token_url: str | None = None
    refresh_url: str | None = None
    scopes: dict[str, str] = {}


class OAuthFlows(_Scheme):
    authorization_code: OAuthFlow | None = None
    implicit: OAuthFlow | None = None
    password: OAuthFlow | None = None
    client_credentials: OAuthFlow | None = None


class OAuth2Scheme(_Scheme):
    type: Literal["oauth2"]
    flows: OAuthFlows


class OpenIdConnectScheme(_Scheme):
    type: Literal["openIdConnect"]
    open_id_connect_url: str


SecurityScheme = Union[HttpBasicScheme, HttpBearerScheme, ApiKeyScheme, OAuth2Scheme, OpenIdConnectScheme]

_SCHEMES = TypeAdapter(dict[str, SecurityScheme])


def parse_security_schemes(value: dict | None) -> dict[str, dict] | None:
    """Validate configured security schemes and return them as OpenAPI objects."""
    if value is None:
        return None
    try:
        parsed = _SCHEMES.validate_python(value)
    except ValidationError as e:
        raise ConfigurationError(f'"securitySchemes" option is invalid: {e}') from e
    return {
        name: scheme.model_dump(by_alias=True, exclude_none=True)
        for name, scheme in parsed.items()
    }


class GeneratorOptions(BaseModel):
    """Options recognized by the rest flavor generator."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
        protected_namespaces=(),
    )

    output: Path
    flavor: Literal["rest"] = "rest"
    spec_version: str = DEFAULT_SPEC_VERSION
    title: str = DEFAULT_TITLE
    version: str = DEFAULT_VERSION
    description: str | None = None
    summary: str | None = None
    prefix: str = ""
    model_name_mapping: dict[str, str] = {}
    security_schemes: dict | None = None
    include: list[str] | None = None

    @field_validator("prefix")
    @classmethod
    def _strip_prefix(cls, value: str) -> str:
        return value[:-1] if value.endswith("/") else value

    @field_validator("spec_version")
    @classmethod
    def _check_spec_version(cls, value: str) -> str:
        parts = value.split(".")
        if len(parts) < 2 or not all(p.isdigit() for p in parts):
            raise ValueError(f"not a valid OpenAPI version: {value!r}")
        return value

    @property
    def nullable_as_type(self) -> bool:
        """OpenAPI 3.1+ expresses null as a type instead of a ``nullable`` flag."""
        major, minor = (int(p) for p in self.spec_version.split(".")[:2])
        return (major, minor) >= (3, 1)

    @classmethod
    def parse(cls, data: dict) -> "GeneratorOptions":
        """Validate a raw options mapping, raising ConfigurationError on failure."""
        if "omitInputDetails" in data or "omit_input_details" in data:
            raise ConfigurationError('"omitInputDetails" option is not supported for "rest" flavor')
        try:
            return cls(**data)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid generator options: {e}") from e


def load_options(file_path: Path | None, **overrides) -> GeneratorOptions:
    """Read options from a YAML/JSON file, letting non-None overrides win."""
    data: dict = {}
    if file_path is not None:
        try:
            data = yaml.safe_load(file_path.read_text(encoding="utf-8")) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Cannot parse options file {file_path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigurationError(f"Options file {file_path} must contain a mapping")
    data.update({k: v for k, v in overrides.items() if v is not None})
    return GeneratorOptions.parse(data)
