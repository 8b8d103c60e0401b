import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from netloader.errors import MalformedShape, MissingField, ModelLoadError, UnknownActivationKind, UnknownLayerKind
from netloader.settings import UnknownPolicy
from netloader.shapes import resolve_dims


logger = logging.getLogger('netloader.network_structure')


class LayerType(Enum):
    DENSE = 'dense'
    TIME_DISTRIBUTED_DENSE = 'time-distributed-dense'
    LSTM = 'lstm'
    ACTIVATION = 'activation'

    @classmethod
    def from_tag(cls, tag: Any) -> 'LayerType':
        try:
            return cls(tag)
        except ValueError:
            raise UnknownLayerKind(tag) from None

    @property
    def is_dense(self) -> bool:
        return self in (LayerType.DENSE, LayerType.TIME_DISTRIBUTED_DENSE)

    @property
    def arity(self) -> int:
        """Number of weight blocks a layer of this type is stored with"""
        return _ARITY[self]


_ARITY = {
    LayerType.DENSE: 2,
    LayerType.TIME_DISTRIBUTED_DENSE: 2,
    LayerType.LSTM: 3,
    LayerType.ACTIVATION: 0,
}


class ActivationType(Enum):
    TANH = 'tanh'
    RELU = 'relu'
    SIGMOID = 'sigmoid'
    SOFTMAX = 'softmax'
    ELU = 'elu'

    @classmethod
    def from_tag(
        cls,
        tag: Any,
        on_unknown: UnknownPolicy = UnknownPolicy.RAISE,
        log: Optional[logging.Logger] = None
    ) -> Optional['ActivationType']:
        """Parse an activation tag. ``None`` and ``''`` both mean no activation."""
        if isinstance(tag, ActivationType):
            return tag
        if tag is None or tag == '':
            return None
        try:
            return cls(tag)
        except ValueError:
            if on_unknown is UnknownPolicy.SKIP:
                (log or logger).warning('Skipping unknown activation type: %r', tag)
                return None
            raise UnknownActivationKind(tag) from None


@dataclass
class LayerSpec:
    """Specification for one layer of a model description"""
    layer_type: LayerType
    shape: List[Any]
    dims: int
    weights: List[Any] = field(default_factory=list)
    activation: Optional[ActivationType] = None

    @classmethod
    def from_dict(
        cls,
        data: Dict[str, Any],
        index: int = 0,
        unknown_activations: UnknownPolicy = UnknownPolicy.RAISE,
        log: Optional[logging.Logger] = None
    ) -> 'LayerSpec':
        """Parse one entry of the ``layers`` array.

        Raises:
            UnknownLayerKind: If ``type`` isn't a supported layer type
            MissingField: If ``type``, ``shape`` or (for weighted layers)
                ``weights`` is absent
            MalformedShape: If ``shape`` can't be resolved
        """
        where = f'layer {index}'
        if not isinstance(data, dict):
            raise ModelLoadError(f'Invalid {where}: expected an object, got {type(data).__name__}')
        if 'type' not in data:
            raise MissingField('type', where)
        layer_type = LayerType.from_tag(data['type'])

        if 'shape' not in data:
            raise MissingField('shape', where)
        shape = data['shape']
        dims = resolve_dims(shape, f'shape of {where}')

        weights = data.get('weights')
        if layer_type.arity > 0:
            if weights is None:
                raise MissingField('weights', where)
            if not isinstance(weights, list):
                raise ModelLoadError(f'Invalid weights of {where}: expected an array')

        # LSTM layers carry their activations internally
        activation = None
        if layer_type is not LayerType.LSTM:
            activation = ActivationType.from_tag(data.get('activation'), unknown_activations, log)

        return cls(
            layer_type=layer_type,
            shape=list(shape),
            dims=dims,
            weights=weights or [],
            activation=activation,
        )


@dataclass
class NetworkSpec:
    """Specification for a sequential neural network"""
    input_shape: List[Any]
    input_size: int
    layers: List[LayerSpec]

    @classmethod
    def from_dict(
        cls,
        data: Dict[str, Any],
        unknown_layers: UnknownPolicy = UnknownPolicy.RAISE,
        unknown_activations: UnknownPolicy = UnknownPolicy.RAISE,
        log: Optional[logging.Logger] = None
    ) -> 'NetworkSpec':
        """Parse a full architecture description.

        Args:
            data: Parsed document with ``in_shape`` and ``layers`` keys
            unknown_layers: Whether an unknown layer type raises or is skipped
            unknown_activations: Whether an unknown activation raises or is skipped
            log: Logger receiving warnings about skipped entries. Defaults to
                the ``netloader.network_structure`` logger

        Returns:
            NetworkSpec with every layer's dimensionality resolved
        """
        if not isinstance(data, dict):
            raise ModelLoadError(f'Invalid model description: expected an object, got {type(data).__name__}')
        for key in ('in_shape', 'layers'):
            if key not in data:
                raise MissingField(key)

        shape = data['in_shape']
        if not isinstance(shape, list):
            raise MalformedShape(f'Invalid in_shape: expected an array, got {type(shape).__name__}')
        if not isinstance(data['layers'], list):
            raise ModelLoadError('Invalid layers: expected an array')
        input_size = resolve_dims(shape, 'in_shape')

        log = log or logger
        layers = []
        for i, layer_data in enumerate(data['layers']):
            try:
                layers.append(LayerSpec.from_dict(layer_data, i, unknown_activations, log))
            except UnknownLayerKind as e:
                if isinstance(e, UnknownActivationKind) or unknown_layers is UnknownPolicy.RAISE:
                    raise
                log.warning('Skipping layer %d with unknown type: %r', i, e.tag)

        return cls(
            input_shape=list(shape),
            input_size=input_size,
            layers=layers,
        )
