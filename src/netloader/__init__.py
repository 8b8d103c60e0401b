from netloader.errors import (
    DimensionMismatch,
    MalformedShape,
    MissingField,
    ModelLoadError,
    NumericConversionFailure,
    UnknownActivationKind,
    UnknownLayerKind,
)
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
from netloader.model_loader import (
    build_model,
    create_activation,
    create_dense,
    create_layer,
    create_lstm,
    load_json,
    parse_json,
)
from netloader.network_structure import ActivationType, LayerSpec, LayerType, NetworkSpec
from netloader.serialization import model_to_dict, save_json
from netloader.settings import LoaderConfig, UnknownPolicy
from netloader.shapes import resolve_dims
from netloader.validation import (
    ValidationResult,
    check_activation,
    check_dense,
    check_layer,
    check_lstm,
    check_model,
)
