import json
import os
from typing import Any, Dict, List, TextIO, Union

from netloader.layers import Activation, Dense, LSTMLayer
from netloader.model import Model


_DENSE_TYPES = ('dense', 'time-distributed-dense')


def _shape(size: int) -> List[Any]:
    return [None, size]


def model_to_dict(model: Model) -> Dict[str, Any]:
    """Write a model back to the description format ``parse_json`` reads.

    Dense kernels are written input-major, as (in_size, out_size), and an
    activation directly following a dense layer is stored in that layer's
    ``activation`` field. Dense layers loaded as ``time-distributed-dense`` keep
    that type. Every shape is written as ``[null, size]``.

    Args:
        model: The model to describe

    Returns:
        Dict that can be passed to ``json.dump``
    """
    layers = []
    for layer in model:
        if isinstance(layer, Dense):
            layers.append({
                'type': 'time-distributed-dense' if layer.time_distributed else 'dense',
                'shape': _shape(layer.out_size),
                'weights': [layer.weights.T.tolist(), layer.bias.tolist()],
                'activation': '',
            })
        elif isinstance(layer, LSTMLayer):
            layers.append({
                'type': 'lstm',
                'shape': _shape(layer.out_size),
                'weights': [layer.W.tolist(), layer.U.tolist(), layer.b.tolist()],
            })
        elif isinstance(layer, Activation):
            prev = layers[-1] if layers else None
            if prev is not None and prev['type'] in _DENSE_TYPES and not prev['activation']:
                prev['activation'] = layer.get_name()
            else:
                layers.append({
                    'type': 'activation',
                    'shape': _shape(layer.out_size),
                    'activation': layer.get_name(),
                })
        else:
            raise ValueError(f'Unsupported layer: {layer!r}')

    return {'in_shape': _shape(model.in_size), 'layers': layers}


def save_json(model: Model, target: Union[str, os.PathLike, TextIO]) -> None:
    """Write a model's description to a JSON file path or an open text stream."""
    data = model_to_dict(model)
    if isinstance(target, (str, os.PathLike)):
        with open(target, 'w') as f:
            json.dump(data, f)
    else:
        json.dump(data, target)
