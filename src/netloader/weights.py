"""Loading of layer weights from their nested-array representation.

Exported descriptions store a dense kernel input-major, as (in_size, out_size),
while ``Dense`` keeps its weights output-major, as (out_size, in_size), so dense
kernels are transposed while they are copied. LSTM kernels are exported in the
layout ``LSTMLayer`` uses and are copied as they are.
"""
from numbers import Real
from typing import Any, Sequence

import numpy as np
import numpy.typing as npt

from netloader.errors import DimensionMismatch, NumericConversionFailure
from netloader.layers import Dense, LSTMLayer


def _is_array(values: Any) -> bool:
    return isinstance(values, (list, tuple, np.ndarray))


def _convert(values: Sequence[Any], dtype, name: str) -> npt.NDArray:
    """Convert a flat sequence of numbers to ``dtype``, rejecting anything lossy."""
    if not np.issubdtype(np.dtype(dtype), np.floating):
        raise NumericConversionFailure(
            f'Cannot convert {name} to {np.dtype(dtype).name}: weights need a floating point type'
        )
    for v in values:
        if not isinstance(v, Real) or isinstance(v, (bool, np.bool_)):
            raise NumericConversionFailure(f'Invalid value in {name}: {v!r} is not a number')
    try:
        src = np.array(values, dtype=np.float64)
    except (OverflowError, TypeError, ValueError) as e:
        raise NumericConversionFailure(f'Invalid value in {name}: {e}') from e

    with np.errstate(over='ignore'):
        out = src.astype(dtype)
    if np.any(np.isfinite(out) != np.isfinite(src)):
        raise NumericConversionFailure(
            f'Value in {name} out of range for {np.dtype(dtype).name}'
        )
    return out


def read_vector(values: Any, size: int, dtype, name: str) -> npt.NDArray:
    """Read a vector of exactly ``size`` numbers."""
    if not _is_array(values):
        raise DimensionMismatch(f'Invalid {name}: expected an array of {size} values')
    if len(values) != size:
        raise DimensionMismatch(
            f'Invalid shape for {name}: expected ({size},), got ({len(values)},)'
        )
    return _convert(values, dtype, name)


def read_matrix(
    values: Any,
    rows: int,
    cols: int,
    dtype,
    name: str,
    transpose: bool = False
) -> npt.NDArray:
    """Read a ``rows`` x ``cols`` nested array.

    Args:
        values: Nested array with ``rows`` rows of ``cols`` numbers each
        rows: Expected number of rows in ``values``
        cols: Expected length of every row
        dtype: Target numpy dtype
        name: Name used in error messages
        transpose: Return the matrix as (cols, rows) instead of (rows, cols)

    Returns:
        The matrix as a numpy array of ``dtype``

    Raises:
        DimensionMismatch: If the row count or any row length is wrong
        NumericConversionFailure: If a value isn't a number representable in
            ``dtype``
    """
    if not _is_array(values):
        raise DimensionMismatch(f'Invalid {name}: expected an array of {rows} rows')
    if len(values) != rows:
        raise DimensionMismatch(
            f'Invalid shape for {name}: expected {rows} rows, got {len(values)}'
        )

    out = np.zeros((cols, rows) if transpose else (rows, cols), dtype=dtype)
    for i, row in enumerate(values):
        row = read_vector(row, cols, dtype, f'{name} row {i}')
        if transpose:
            out[:, i] = row
        else:
            out[i] = row
    return out


def _check_block_count(weights: Any, expected: int, name: str) -> None:
    if not _is_array(weights):
        raise DimensionMismatch(f'Invalid {name} weights: expected an array of {expected} blocks')
    if len(weights) != expected:
        raise DimensionMismatch(
            f'Invalid {name} weights: expected {expected} blocks, got {len(weights)}'
        )


def load_dense(dense: Dense, weights: Sequence[Any]) -> None:
    """Load ``[kernel, bias]`` into a dense layer.

    The kernel is read as (in_size, out_size) and stored transposed.
    """
    _check_block_count(weights, 2, 'dense')
    dense.set_weights(read_matrix(
        weights[0], dense.in_size, dense.out_size, dense.dtype, 'dense kernel', transpose=True
    ))
    dense.set_bias(read_vector(weights[1], dense.out_size, dense.dtype, 'dense bias'))


def load_lstm(lstm: LSTMLayer, weights: Sequence[Any]) -> None:
    """Load ``[kernel, recurrent_kernel, bias]`` into an LSTM layer, untransposed."""
    _check_block_count(weights, 3, 'lstm')
    gates = 4 * lstm.out_size
    lstm.set_w_vals(read_matrix(weights[0], lstm.in_size, gates, lstm.dtype, 'lstm kernel'))
    lstm.set_u_vals(read_matrix(weights[1], lstm.out_size, gates, lstm.dtype, 'lstm recurrent kernel'))
    lstm.set_b_vals(read_vector(weights[2], gates, lstm.dtype, 'lstm bias'))
