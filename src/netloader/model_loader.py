import json
import logging
import os
from typing import Any, Dict, Optional, TextIO, Union

import numpy as np

from netloader.errors import UnknownLayerKind
from netloader.layers import (
    Activation,
    Dense,
    ELuActivation,
    LSTMLayer,
    ReLuActivation,
    SigmoidActivation,
    SoftmaxActivation,
    TanhActivation,
)
from netloader.model import Model
from netloader.network_structure import ActivationType, LayerSpec, LayerType, NetworkSpec
from netloader.settings import LoaderConfig, UnknownPolicy
from netloader.weights import load_dense, load_lstm


logger = logging.getLogger('netloader.loader')


_ACTIVATIONS = {
    ActivationType.TANH: TanhActivation,
    ActivationType.RELU: ReLuActivation,
    ActivationType.SIGMOID: SigmoidActivation,
    ActivationType.SOFTMAX: SoftmaxActivation,
    ActivationType.ELU: ELuActivation,
}


def create_dense(
    in_size: int,
    out_size: int,
    weights: Any,
    dtype=np.float32,
    time_distributed: bool = False
) -> Dense:
    """Create a dense layer and load its ``[kernel, bias]`` weights."""
    dense = Dense(in_size, out_size, dtype, time_distributed)
    load_dense(dense, weights)
    return dense


def create_lstm(in_size: int, out_size: int, weights: Any, dtype=np.float32) -> LSTMLayer:
    """Create an LSTM layer and load its ``[kernel, recurrent_kernel, bias]`` weights."""
    lstm = LSTMLayer(in_size, out_size, dtype)
    load_lstm(lstm, weights)
    return lstm


def create_layer(
    kind: Union[str, LayerType],
    in_size: int,
    out_size: int,
    weights: Any,
    dtype=np.float32
) -> Union[Dense, LSTMLayer]:
    """Create a weighted layer of the given kind with its weights loaded.

    Raises:
        UnknownLayerKind: If ``kind`` isn't a weighted layer type
        DimensionMismatch: If the weights don't match ``in_size``/``out_size``
        NumericConversionFailure: If a weight isn't representable in ``dtype``
    """
    layer_type = kind if isinstance(kind, LayerType) else LayerType.from_tag(kind)
    if layer_type.is_dense:
        return create_dense(
            in_size, out_size, weights, dtype,
            time_distributed=layer_type is LayerType.TIME_DISTRIBUTED_DENSE
        )
    if layer_type is LayerType.LSTM:
        return create_lstm(in_size, out_size, weights, dtype)
    raise UnknownLayerKind(layer_type.value, f'Layer type {layer_type.value!r} has no weights')


def create_activation(
    kind: Union[None, str, ActivationType],
    dims: int,
    dtype=np.float32,
    on_unknown: UnknownPolicy = UnknownPolicy.RAISE,
    log: Optional[logging.Logger] = None
) -> Optional[Activation]:
    """Create an activation layer of the given kind.

    Returns ``None`` when no activation is requested (``kind`` is ``None`` or
    empty), or when ``kind`` is unknown and ``on_unknown`` is ``SKIP``.
    """
    activation_type = ActivationType.from_tag(kind, on_unknown, log)
    if activation_type is None:
        return None
    return _ACTIVATIONS[activation_type](dims, dtype)


def _add_activation(model: Model, spec: LayerSpec, dtype, log: logging.Logger) -> None:
    if spec.activation is None:
        return
    log.debug('  activation: %s', spec.activation.value)
    model.add_layer(create_activation(spec.activation, spec.dims, dtype))


def build_model(
    network_spec: NetworkSpec,
    config: Optional[LoaderConfig] = None,
    log: Optional[logging.Logger] = None
) -> Model:
    """Build a model from a parsed description.

    Each layer is sized from the output of the layer before it, starting from
    the description's input size.
    """
    config = config or LoaderConfig()
    log = log or logger

    log.debug('# dimensions: %d', network_spec.input_size)
    model = Model(network_spec.input_size, config.dtype)

    for spec in network_spec.layers:
        log.debug('Layer: %s', spec.layer_type.value)
        log.debug('  Dims: %d', spec.dims)

        if spec.layer_type is LayerType.ACTIVATION:
            _add_activation(model, spec, config.dtype, log)
            continue

        layer = create_layer(
            spec.layer_type, model.get_next_in_size(), spec.dims, spec.weights, config.dtype
        )
        model.add_layer(layer)
        if spec.layer_type.is_dense:
            _add_activation(model, spec, config.dtype, log)

    return model


def parse_json(
    data: Dict[str, Any],
    config: Optional[LoaderConfig] = None,
    log: Optional[logging.Logger] = None
) -> Model:
    """Create a model from its parsed JSON description.

    Args:
        data: Document with ``in_shape`` and ``layers`` keys, as returned by
            ``json.load``
        config: Loader configuration. Defaults to ``LoaderConfig()``
        log: Logger receiving the debug trace of the build. Defaults to
            the ``netloader.loader`` logger

    Returns:
        The fully loaded model

    Raises:
        ModelLoadError: If any part of the description is invalid. No model
            is returned in that case
    """
    config = config or LoaderConfig()
    network_spec = NetworkSpec.from_dict(
        data,
        unknown_layers=config.unknown_layers,
        unknown_activations=config.unknown_activations,
        log=log,
    )
    return build_model(network_spec, config, log)


def load_json(
    source: Union[str, os.PathLike, TextIO],
    config: Optional[LoaderConfig] = None,
    log: Optional[logging.Logger] = None
) -> Model:
    """Create a model from a JSON file path or an open text stream."""
    if isinstance(source, (str, os.PathLike)):
        with open(source, 'r') as f:
            data = json.load(f)
    else:
        data = json.load(source)
    return parse_json(data, config, log)
