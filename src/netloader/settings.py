from dataclasses import dataclass
from enum import Enum

import numpy as np


class UnknownPolicy(Enum):
    """What to do with a layer or activation tag the loader doesn't know"""
    RAISE = 'raise'
    SKIP = 'skip'


@dataclass
class LoaderConfig:
    """Configuration for building a model from its description"""
    dtype: type = np.float32
    unknown_layers: UnknownPolicy = UnknownPolicy.RAISE
    unknown_activations: UnknownPolicy = UnknownPolicy.RAISE
