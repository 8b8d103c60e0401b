import io
import json
import logging

import numpy as np
import pytest

from netloader import (
    DimensionMismatch,
    LoaderConfig,
    MalformedShape,
    MissingField,
    ModelLoadError,
    NumericConversionFailure,
    UnknownActivationKind,
    UnknownLayerKind,
    UnknownPolicy,
)
from netloader.layers import (
    Dense,
    ELuActivation,
    LSTMLayer,
    ReLuActivation,
    SigmoidActivation,
    SoftmaxActivation,
    TanhActivation,
)
from netloader.model_loader import (
    create_activation,
    create_dense,
    create_layer,
    create_lstm,
    load_json,
    parse_json,
)


def test_dense_with_activation(make_dense):
    """in_shape [1, 8] and one dense(4, tanh) layer give two layers."""
    description = {
        'in_shape': [1, 8],
        'layers': [dict(make_dense(8, 4, activation='tanh'), shape=[1, 4])],
    }
    model = parse_json(description)

    assert len(model) == 2
    assert isinstance(model[0], Dense)
    assert model[0].in_size == 8
    assert model[0].out_size == 4
    assert isinstance(model[1], TanhActivation)
    assert model[1].out_size == 4
    assert model.get_next_in_size() == 4


def test_four_dimensional_shapes(make_lstm):
    """4-D shapes collapse channels into features."""
    description = {
        'in_shape': [1, 1, 2, 3],
        'layers': [make_lstm(6, 10, shape=[1, 1, 2, 5])],
    }
    model = parse_json(description)

    assert len(model) == 1
    assert isinstance(model[0], LSTMLayer)
    assert model[0].in_size == 6
    assert model[0].out_size == 10
    assert model[0].W.shape == (6, 40)
    assert model[0].U.shape == (10, 40)


def test_unknown_layer_raises_by_default(make_dense):
    description = {
        'in_shape': [1, 8],
        'layers': [
            make_dense(8, 4),
            {'type': 'conv', 'shape': [1, 4], 'weights': []},
            make_dense(4, 2),
        ],
    }
    with pytest.raises(UnknownLayerKind) as e:
        parse_json(description)
    assert e.value.tag == 'conv'


def test_unknown_layer_skipped(make_dense, caplog):
    description = {
        'in_shape': [1, 8],
        'layers': [
            make_dense(8, 4),
            {'type': 'conv', 'shape': [1, 4], 'weights': []},
            make_dense(4, 2),
        ],
    }
    config = LoaderConfig(unknown_layers=UnknownPolicy.SKIP)
    with caplog.at_level(logging.WARNING):
        model = parse_json(description, config)

    assert len(model) == 2
    assert [layer.out_size for layer in model] == [4, 2]
    assert 'conv' in caplog.text


def test_sequential_sizes(make_dense):
    sizes = [8, 5, 3, 2]
    description = {
        'in_shape': [None, sizes[0]],
        'layers': [make_dense(i, o) for i, o in zip(sizes, sizes[1:])],
    }
    model = parse_json(description)

    assert len(model) == 3
    for layer, in_size, out_size in zip(model, sizes, sizes[1:]):
        assert layer.in_size == in_size
        assert layer.out_size == out_size
    assert model.get_next_in_size() == 2


def test_mixed_layers(simple_description):
    model = parse_json(simple_description)

    assert [type(layer) for layer in model] == [
        Dense, TanhActivation, LSTMLayer, ReLuActivation, Dense
    ]
    assert model[2].in_size == 4
    assert model[4].in_size == 3
    assert model.out_size == 2


def test_weights_are_loaded(make_dense):
    layer = make_dense(3, 2)
    model = parse_json({'in_shape': [None, 3], 'layers': [layer]})
    np.testing.assert_allclose(model[0].weights, np.array(layer['weights'][0]).T, rtol=1e-6)
    np.testing.assert_allclose(model[0].bias, layer['weights'][1], rtol=1e-6)


def test_time_distributed_dense(make_dense):
    layer = make_dense(3, 2, activation='sigmoid', layer_type='time-distributed-dense')
    model = parse_json({'in_shape': [None, 3], 'layers': [layer]})
    assert isinstance(model[0], Dense)
    assert isinstance(model[1], SigmoidActivation)


@pytest.mark.parametrize('activation', ['', None])
def test_no_activation(make_dense, activation):
    layer = make_dense(3, 2, activation=activation)
    model = parse_json({'in_shape': [None, 3], 'layers': [layer]})
    assert len(model) == 1


def test_missing_activation_field(make_dense):
    layer = make_dense(3, 2)
    del layer['activation']
    model = parse_json({'in_shape': [None, 3], 'layers': [layer]})
    assert len(model) == 1


def test_lstm_ignores_activation(make_lstm):
    layer = make_lstm(3, 2)
    layer['activation'] = 'tanh'
    model = parse_json({'in_shape': [None, 3], 'layers': [layer]})
    assert len(model) == 1


def test_activation_entry_without_weights():
    description = {
        'in_shape': [None, 3],
        'layers': [{'type': 'activation', 'shape': [None, 3], 'activation': 'softmax'}],
    }
    model = parse_json(description)
    assert len(model) == 1
    assert isinstance(model[0], SoftmaxActivation)


def test_unknown_activation(make_dense):
    layer = make_dense(3, 2, activation='swish')
    description = {'in_shape': [None, 3], 'layers': [layer]}

    with pytest.raises(UnknownActivationKind):
        parse_json(description)

    # An unknown activation is never treated as an unknown layer to skip
    with pytest.raises(UnknownActivationKind):
        parse_json(description, LoaderConfig(unknown_layers=UnknownPolicy.SKIP))

    model = parse_json(description, LoaderConfig(unknown_activations=UnknownPolicy.SKIP))
    assert len(model) == 1


@pytest.mark.parametrize('key', ['in_shape', 'layers'])
def test_missing_top_level_field(simple_description, key):
    del simple_description[key]
    with pytest.raises(MissingField) as e:
        parse_json(simple_description)
    assert e.value.field == key


def test_missing_field_is_key_error(simple_description):
    del simple_description['in_shape']
    with pytest.raises(KeyError):
        parse_json(simple_description)


@pytest.mark.parametrize('key', ['type', 'shape', 'weights'])
def test_missing_layer_field(simple_description, key):
    del simple_description['layers'][0][key]
    with pytest.raises(MissingField, match='layer 0'):
        parse_json(simple_description)


def test_malformed_in_shape(simple_description):
    simple_description['in_shape'] = 8
    with pytest.raises(MalformedShape):
        parse_json(simple_description)

    simple_description['in_shape'] = [1, 2, 8]
    with pytest.raises(MalformedShape):
        parse_json(simple_description)


def test_layers_not_an_array(simple_description):
    simple_description['layers'] = {'0': simple_description['layers'][0]}
    with pytest.raises(ModelLoadError):
        parse_json(simple_description)


def test_malformed_layer_shape(simple_description):
    simple_description['layers'][1]['shape'] = [3]
    with pytest.raises(MalformedShape):
        parse_json(simple_description)


def test_size_mismatch_between_layers(make_dense):
    """The second layer's kernel must have one row per output of the first."""
    description = {
        'in_shape': [None, 8],
        'layers': [make_dense(8, 4), make_dense(5, 2)],
    }
    with pytest.raises(DimensionMismatch):
        parse_json(description)


def test_precision(simple_description):
    model = parse_json(simple_description, LoaderConfig(dtype=np.float64))
    assert model[0].weights.dtype == np.float64
    assert model[2].W.dtype == np.float64
    assert model.forward(np.ones(8)).dtype == np.float64


def test_debug_trace(simple_description, caplog):
    log = logging.getLogger('tests.trace')
    caplog.set_level(logging.DEBUG, logger='tests.trace')
    parse_json(simple_description, log=log)

    assert '# dimensions: 8' in caplog.text
    assert 'Layer: lstm' in caplog.text
    assert 'activation: tanh' in caplog.text
    assert all(record.name == 'tests.trace' for record in caplog.records)


def test_load_json_path(simple_description, tmp_path):
    file_path = tmp_path / 'model.json'
    file_path.write_text(json.dumps(simple_description))

    model = load_json(file_path)
    assert len(model) == 5

    model = load_json(str(file_path))
    assert len(model) == 5


def test_load_json_stream(simple_description):
    model = load_json(io.StringIO(json.dumps(simple_description)))
    assert len(model) == 5


def test_create_layer(make_dense, make_lstm):
    dense = create_layer('dense', 3, 2, make_dense(3, 2)['weights'])
    assert isinstance(dense, Dense)
    td = create_layer('time-distributed-dense', 3, 2, make_dense(3, 2)['weights'])
    assert isinstance(td, Dense)
    lstm = create_layer('lstm', 3, 2, make_lstm(3, 2)['weights'])
    assert isinstance(lstm, LSTMLayer)

    with pytest.raises(UnknownLayerKind):
        create_layer('conv', 3, 2, [])
    with pytest.raises(UnknownLayerKind):
        create_layer('activation', 3, 3, [])


def test_create_dense_and_lstm(make_dense, make_lstm):
    dense = create_dense(3, 2, make_dense(3, 2)['weights'], np.float64)
    assert dense.weights.shape == (2, 3)
    lstm = create_lstm(3, 2, make_lstm(3, 2)['weights'], np.float64)
    assert lstm.W.shape == (3, 8)

    with pytest.raises(DimensionMismatch):
        create_dense(3, 2, make_dense(2, 3)['weights'])


@pytest.mark.parametrize('kind, cls', [
    ('tanh', TanhActivation),
    ('relu', ReLuActivation),
    ('sigmoid', SigmoidActivation),
    ('softmax', SoftmaxActivation),
    ('elu', ELuActivation),
])
def test_create_activation(kind, cls):
    activation = create_activation(kind, 5)
    assert isinstance(activation, cls)
    assert activation.out_size == 5
    assert activation.get_name() == kind


def test_create_activation_absent():
    assert create_activation('', 5) is None
    assert create_activation(None, 5) is None
    assert create_activation('gelu', 5, on_unknown=UnknownPolicy.SKIP) is None
    with pytest.raises(UnknownActivationKind):
        create_activation('gelu', 5)


def test_integer_precision_rejected(simple_description):
    with pytest.raises(NumericConversionFailure):
        parse_json(simple_description, LoaderConfig(dtype=np.int32))


def test_skip_warnings_use_given_logger(make_dense, caplog):
    description = {
        'in_shape': [None, 8],
        'layers': [
            make_dense(8, 4, activation='swish'),
            {'type': 'conv', 'shape': [None, 4], 'weights': []},
        ],
    }
    config = LoaderConfig(
        unknown_layers=UnknownPolicy.SKIP,
        unknown_activations=UnknownPolicy.SKIP,
    )
    log = logging.getLogger('tests.build')
    caplog.set_level(logging.DEBUG)
    model = parse_json(description, config, log=log)

    assert len(model) == 1
    assert 'swish' in caplog.text
    assert 'conv' in caplog.text
    assert {record.name for record in caplog.records} == {'tests.build'}
