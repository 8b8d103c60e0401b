from typing import Iterator, List

import numpy as np
import numpy.typing as npt

from netloader.layers import Layer, float_dtype


class Model:
    """Sequential model owning an ordered list of layers.

    The model keeps track of the input size the next appended layer has to
    accept, which is the output size of the last layer (or the model's own
    input size while it's empty).
    """

    def __init__(self, in_size: int, dtype=np.float32):
        self.in_size = in_size
        self.dtype = float_dtype(dtype)
        self._layers: List[Layer] = []
        self._next_in_size = in_size


    def add_layer(self, layer: Layer) -> None:
        """Append a layer, taking ownership of it."""
        self._layers.append(layer)
        self._next_in_size = layer.out_size


    def get_next_in_size(self) -> int:
        return self._next_in_size


    @property
    def layers(self) -> List[Layer]:
        return list(self._layers)


    @property
    def out_size(self) -> int:
        return self._next_in_size


    def reset(self) -> None:
        """Reset the state of every stateful layer."""
        for layer in self._layers:
            layer.reset()


    def forward(self, x: npt.ArrayLike) -> npt.NDArray:
        """Run one input frame through every layer in order.

        Args:
            x: Input vector of shape (in_size,)

        Returns:
            Output vector of shape (out_size,)
        """
        out = np.asarray(x, dtype=self.dtype)
        if out.shape[-1] != self.in_size:
            raise ValueError(
                f'Invalid input shape: expected last axis {self.in_size}, got {out.shape}'
            )
        for layer in self._layers:
            out = layer.forward(out)
        return out


    def __len__(self) -> int:
        return len(self._layers)


    def __iter__(self) -> Iterator[Layer]:
        return iter(self._layers)


    def __getitem__(self, idx: int) -> Layer:
        return self._layers[idx]
