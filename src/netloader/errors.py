from typing import Optional


class ModelLoadError(ValueError):
    """Base class for every failure raised while building a model."""


class MalformedShape(ModelLoadError):
    """A shape field is not a 2 or 4 element sequence of non-negative ints."""


class MissingField(ModelLoadError, KeyError):
    """A required key is absent from the architecture description."""

    def __init__(self, field: str, where: str = 'model'):
        self.field = field
        self.where = where
        super().__init__(f"Missing field '{field}' in {where}")

    def __str__(self) -> str:
        return self.args[0]


class DimensionMismatch(ModelLoadError):
    """A weight block disagrees with the sizes implied by the layer."""


class UnknownLayerKind(ModelLoadError):
    """A layer type tag outside the supported set."""

    def __init__(self, tag: str, message: Optional[str] = None):
        self.tag = tag
        super().__init__(message or f'Unknown layer type: {tag!r}')


class UnknownActivationKind(UnknownLayerKind):
    """An activation tag outside the supported set."""

    def __init__(self, tag: str):
        super().__init__(tag, f'Unknown activation type: {tag!r}')


class NumericConversionFailure(ModelLoadError):
    """A weight value cannot be represented in the target precision."""
