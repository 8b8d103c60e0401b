"""
Shared pytest fixtures for building model descriptions.
"""

import numpy as np
import pytest


@pytest.fixture
def rng():
    return np.random.default_rng(0)


@pytest.fixture
def make_dense(rng):
    """Create a dense layer entry with an (in_size, out_size) kernel."""
    def _make(in_size, out_size, activation='', layer_type='dense'):
        return {
            'type': layer_type,
            'shape': [None, out_size],
            'weights': [
                rng.standard_normal((in_size, out_size)).tolist(),
                rng.standard_normal(out_size).tolist(),
            ],
            'activation': activation,
        }
    return _make


@pytest.fixture
def make_lstm(rng):
    """Create an LSTM layer entry with gate-concatenated kernels."""
    def _make(in_size, out_size, shape=None):
        return {
            'type': 'lstm',
            'shape': shape or [None, out_size],
            'weights': [
                rng.standard_normal((in_size, 4 * out_size)).tolist(),
                rng.standard_normal((out_size, 4 * out_size)).tolist(),
                rng.standard_normal(4 * out_size).tolist(),
            ],
        }
    return _make


@pytest.fixture
def simple_description(make_dense, make_lstm):
    """8 inputs -> dense(4, tanh) -> lstm(3) -> relu -> dense(2)."""
    return {
        'in_shape': [None, 8],
        'layers': [
            make_dense(8, 4, activation='tanh'),
            make_lstm(4, 3),
            {'type': 'activation', 'shape': [None, 3], 'activation': 'relu'},
            make_dense(3, 2),
        ],
    }
