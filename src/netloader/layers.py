import numpy as np
import numpy.typing as npt

from netloader.errors import DimensionMismatch, NumericConversionFailure


def float_dtype(dtype) -> np.dtype:
    dtype = np.dtype(dtype)
    if not np.issubdtype(dtype, np.floating):
        raise NumericConversionFailure(f'Unsupported dtype: {dtype}, weights need a floating point type')
    return dtype


def _check_shape(arr: np.ndarray, expected_shape, name: str) -> None:
    if arr.shape != expected_shape:
        raise DimensionMismatch(
            f'Invalid shape for {name}: expected {expected_shape}, got {arr.shape}'
        )


class Layer:
    """Base class for a layer with fixed input and output sizes"""
    name = 'layer'

    def __init__(self, in_size: int, out_size: int, dtype=np.float32):
        self.in_size = in_size
        self.out_size = out_size
        self.dtype = float_dtype(dtype)

    def reset(self) -> None:
        """Clear any state carried between calls to ``forward``."""

    def forward(self, x: npt.NDArray) -> npt.NDArray:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f'{type(self).__name__}(in_size={self.in_size}, out_size={self.out_size})'


class Dense(Layer):
    """Fully connected layer computing ``weights @ x + bias``.

    ``weights`` is stored with shape (out_size, in_size) so each output is a
    contiguous row. Inputs with a leading time axis are transformed per step,
    which is how a time-distributed dense layer is applied.
    """
    name = 'dense'

    def __init__(self, in_size: int, out_size: int, dtype=np.float32, time_distributed: bool = False):
        super().__init__(in_size, out_size, dtype)
        self.time_distributed = time_distributed
        self.weights = np.zeros((out_size, in_size), dtype=self.dtype)
        self.bias = np.zeros(out_size, dtype=self.dtype)

    def set_weights(self, weights: npt.ArrayLike) -> None:
        w = np.asarray(weights, dtype=self.dtype)
        _check_shape(w, (self.out_size, self.in_size), 'dense weights')
        self.weights = w.copy()

    def set_bias(self, bias: npt.ArrayLike) -> None:
        b = np.asarray(bias, dtype=self.dtype)
        _check_shape(b, (self.out_size,), 'dense bias')
        self.bias = b.copy()

    def forward(self, x: npt.NDArray) -> npt.NDArray:
        return np.asarray(x, dtype=self.dtype) @ self.weights.T + self.bias


class LSTMLayer(Layer):
    """Single LSTM layer processing one time step per call to ``forward``.

    Kernels are stored input-major with the four gates concatenated along the
    output axis in the order input, forget, cell, output:
        W: (in_size, 4 * out_size) applied to the input
        U: (out_size, 4 * out_size) applied to the previous hidden state
        b: (4 * out_size,)
    """
    name = 'lstm'

    def __init__(self, in_size: int, out_size: int, dtype=np.float32):
        super().__init__(in_size, out_size, dtype)
        self.W = np.zeros((in_size, 4 * out_size), dtype=self.dtype)
        self.U = np.zeros((out_size, 4 * out_size), dtype=self.dtype)
        self.b = np.zeros(4 * out_size, dtype=self.dtype)
        self.reset()

    def set_w_vals(self, w_vals: npt.ArrayLike) -> None:
        w = np.asarray(w_vals, dtype=self.dtype)
        _check_shape(w, (self.in_size, 4 * self.out_size), 'lstm kernel')
        self.W = w.copy()

    def set_u_vals(self, u_vals: npt.ArrayLike) -> None:
        u = np.asarray(u_vals, dtype=self.dtype)
        _check_shape(u, (self.out_size, 4 * self.out_size), 'lstm recurrent kernel')
        self.U = u.copy()

    def set_b_vals(self, b_vals: npt.ArrayLike) -> None:
        b = np.asarray(b_vals, dtype=self.dtype)
        _check_shape(b, (4 * self.out_size,), 'lstm bias')
        self.b = b.copy()

    def reset(self) -> None:
        self.h = np.zeros(self.out_size, dtype=self.dtype)
        self.c = np.zeros(self.out_size, dtype=self.dtype)

    def forward(self, x: npt.NDArray) -> npt.NDArray:
        z = np.asarray(x, dtype=self.dtype) @ self.W + self.h @ self.U + self.b
        i, f, g, o = np.split(z, 4)
        self.c = _sigmoid(f) * self.c + _sigmoid(i) * np.tanh(g)
        self.h = _sigmoid(o) * np.tanh(self.c)
        return self.h.copy()


def _sigmoid(x: npt.NDArray) -> npt.NDArray:
    return 1 / (1 + np.exp(-x))


class Activation(Layer):
    """Element-wise (or vector-wise) activation, same input and output size"""

    def __init__(self, size: int, dtype=np.float32):
        super().__init__(size, size, dtype)

    def get_name(self) -> str:
        return self.name

    def __repr__(self) -> str:
        return f'{type(self).__name__}(size={self.out_size})'


class TanhActivation(Activation):
    name = 'tanh'

    def forward(self, x):
        return np.tanh(np.asarray(x, dtype=self.dtype))


class ReLuActivation(Activation):
    name = 'relu'

    def forward(self, x):
        return np.maximum(np.asarray(x, dtype=self.dtype), 0)


class SigmoidActivation(Activation):
    name = 'sigmoid'

    def forward(self, x):
        return _sigmoid(np.asarray(x, dtype=self.dtype))


class SoftmaxActivation(Activation):
    name = 'softmax'

    def forward(self, x):
        x = np.asarray(x, dtype=self.dtype)
        e = np.exp(x - np.max(x, axis=-1, keepdims=True))
        return e / np.sum(e, axis=-1, keepdims=True)


class ELuActivation(Activation):
    name = 'elu'

    def __init__(self, size: int, dtype=np.float32, alpha: float = 1.0):
        super().__init__(size, dtype)
        self.alpha = alpha

    def forward(self, x):
        x = np.asarray(x, dtype=self.dtype)
        return np.where(x > 0, x, self.alpha * np.expm1(np.minimum(x, 0))).astype(self.dtype)
