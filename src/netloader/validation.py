import logging
from dataclasses import dataclass
from typing import Optional, Union

from netloader.layers import Activation, Dense, Layer, LSTMLayer
from netloader.model import Model
from netloader.network_structure import LayerType, NetworkSpec


logger = logging.getLogger('netloader.validation')


@dataclass
class ValidationResult:
    """Outcome of checking a layer against its expected type and size.

    Attributes:
        passed: Whether the layer matched
        message: Description of the mismatch. Only set when the check was run
            with ``verbose=True`` and failed
    """
    passed: bool
    message: Optional[str] = None

    def __bool__(self) -> bool:
        return self.passed


def _fail(message: str, verbose: bool) -> ValidationResult:
    if verbose:
        logger.debug(message)
        return ValidationResult(False, message)
    return ValidationResult(False)


def _tag(kind: Union[str, LayerType]) -> str:
    return kind.value if isinstance(kind, LayerType) else kind


def check_dense(dense: Dense, kind: Union[str, LayerType], dims: int, verbose: bool = False) -> ValidationResult:
    """Check that a dense layer was described as ``kind`` with ``dims`` outputs."""
    if _tag(kind) not in (LayerType.DENSE.value, LayerType.TIME_DISTRIBUTED_DENSE.value):
        return _fail('Wrong layer type! Expected: Dense', verbose)
    if dims != dense.out_size:
        return _fail(f'Wrong layer size! Expected: {dense.out_size}', verbose)
    return ValidationResult(True)


def check_lstm(lstm: LSTMLayer, kind: Union[str, LayerType], dims: int, verbose: bool = False) -> ValidationResult:
    """Check that an LSTM layer was described as ``kind`` with ``dims`` outputs."""
    if _tag(kind) != LayerType.LSTM.value:
        return _fail('Wrong layer type! Expected: LSTM', verbose)
    if dims != lstm.out_size:
        return _fail(f'Wrong layer size! Expected: {lstm.out_size}', verbose)
    return ValidationResult(True)


def check_activation(activation: Activation, kind: str, dims: int, verbose: bool = False) -> ValidationResult:
    """Check an activation's size, then that it reports itself as ``kind``."""
    if dims != activation.out_size:
        return _fail(f'Wrong layer size! Expected: {activation.out_size}', verbose)
    if kind != activation.get_name():
        return _fail(f'Wrong layer type! Expected: {activation.get_name()}', verbose)
    return ValidationResult(True)


def check_layer(layer: Layer, kind: str, dims: int, verbose: bool = False) -> ValidationResult:
    """Run the check matching the class of ``layer``."""
    if isinstance(layer, Dense):
        return check_dense(layer, kind, dims, verbose)
    if isinstance(layer, LSTMLayer):
        return check_lstm(layer, kind, dims, verbose)
    if isinstance(layer, Activation):
        return check_activation(layer, kind, dims, verbose)
    return _fail(f'Unsupported layer: {layer!r}', verbose)


def check_model(model: Model, network_spec: NetworkSpec, verbose: bool = False) -> ValidationResult:
    """Check every layer of ``model`` against the description it should match.

    Layers are expected in the order the loader builds them: a dense layer is
    followed by its activation if it names one, and LSTM layers never are.
    """
    if model.in_size != network_spec.input_size:
        return _fail(
            f'Wrong input size! Expected: {network_spec.input_size}, got {model.in_size}',
            verbose
        )

    expected = []
    for spec in network_spec.layers:
        if spec.layer_type is not LayerType.ACTIVATION:
            expected.append((spec.layer_type.value, spec.dims))
        if spec.activation is not None and spec.layer_type is not LayerType.LSTM:
            expected.append((spec.activation.value, spec.dims))

    if len(expected) != len(model):
        return _fail(
            f'Wrong number of layers! Expected: {len(expected)}, got {len(model)}', verbose
        )

    for i, (layer, (kind, dims)) in enumerate(zip(model, expected)):
        result = check_layer(layer, kind, dims, verbose)
        if not result:
            if verbose:
                return ValidationResult(False, f'Layer {i}: {result.message}')
            return result
    return ValidationResult(True)
