"""Errors raised while loading models or generating documents."""


class GeneratorError(Exception):
    """Base class for all restful-openapi errors."""


class ConfigurationError(GeneratorError):
    """An option value is invalid or not supported by the rest flavor."""


class ResolutionError(ConfigurationError):
    """A field type names a declaration that does not exist in the model."""

    def __init__(self, type_name: str, owner: str | None = None):
        self.type_name = type_name
        self.owner = owner
        where = f' (in "{owner}")' if owner else ""
        super().__init__(f'Type "{type_name}" cannot be resolved to an entity, enum or type def{where}')
