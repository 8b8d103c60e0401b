from collections import abc
from numbers import Integral
from typing import Any, Sequence

from netloader.errors import MalformedShape


def _is_axis(value: Any) -> bool:
    return isinstance(value, Integral) and not isinstance(value, bool) and value >= 0


def resolve_dims(shape: Sequence[Any], name: str = 'shape') -> int:
    """Resolve a shape description to the feature count a layer is sized by.

    A 2-D shape ``[sequence, features]`` resolves to its last axis. A 4-D shape
    ``[batch, time, channels, features]`` resolves to ``channels * features``,
    collapsing the channel axis into the feature axis.

    Leading axes that don't take part in the result may be ``None`` (exporters
    write an unknown batch size as ``null``).

    Args:
        shape: The shape sequence, usually a list parsed from JSON
        name: Field name used in error messages

    Returns:
        The positive dimensionality of the shape

    Raises:
        MalformedShape: If the shape has the wrong length or holds anything
            other than non-negative integers where sizes are read from
    """
    if isinstance(shape, (str, bytes)) or not isinstance(shape, abc.Sequence):
        raise MalformedShape(f'Invalid {name}: expected a sequence, got {type(shape).__name__}')
    if len(shape) not in (2, 4):
        raise MalformedShape(
            f'Invalid {name}: expected 2 or 4 axes, got {len(shape)} ({list(shape)})'
        )

    used = shape[2:] if len(shape) == 4 else shape[-1:]
    leading = shape[:len(shape) - len(used)]
    for axis in used:
        if not _is_axis(axis):
            raise MalformedShape(f'Invalid {name}: {list(shape)}')
    for axis in leading:
        if axis is not None and not _is_axis(axis):
            raise MalformedShape(f'Invalid {name}: {list(shape)}')

    dims = 1
    for axis in used:
        dims *= int(axis)
    if dims == 0:
        raise MalformedShape(f'Invalid {name}: {list(shape)} resolves to zero features')
    return dims
