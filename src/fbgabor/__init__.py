"""fbgabor public API."""

from .configs import (
    SynthesisConfig,
    build_plan,
    load_synthesis_config,
    load_yaml,
    parse_synthesis_config,
    save_yaml,
)
from .engine import (
    ENGINES,
    NumpyFFTEngine,
    ScipyFFTEngine,
    SpectralEngine,
    TransformHandle,
    register_engine,
)
from .errors import (
    EngineInitError,
    GaborError,
    InvalidArgumentError,
    InvalidConventionError,
    InvalidHandleError,
    InvalidLengthError,
    InvalidSizeError,
    NullArgumentError,
    OutOfMemoryError,
    PlanBusyError,
    Status,
    status_of,
)
from .logging_utils import JsonlLogger
from .plan import (
    IdgtFbPlan,
    idgt_fb,
    idgt_fb_d,
    idgt_fb_dc,
    idgt_fb_done,
    idgt_fb_execute,
    idgt_fb_init,
    idgt_fb_s,
    idgt_fb_sc,
)
from .signal import fir_window, prepare_window
from .types import (
    DOUBLE_COMPLEX,
    DOUBLE_REAL,
    SINGLE_COMPLEX,
    SINGLE_REAL,
    PhaseConvention,
    Precision,
    SynthesisKind,
    WindowDomain,
)

__all__ = [
    "IdgtFbPlan",
    "idgt_fb",
    "idgt_fb_init",
    "idgt_fb_execute",
    "idgt_fb_done",
    "idgt_fb_d",
    "idgt_fb_s",
    "idgt_fb_dc",
    "idgt_fb_sc",
    "PhaseConvention",
    "Precision",
    "WindowDomain",
    "SynthesisKind",
    "DOUBLE_REAL",
    "SINGLE_REAL",
    "DOUBLE_COMPLEX",
    "SINGLE_COMPLEX",
    "SpectralEngine",
    "ScipyFFTEngine",
    "NumpyFFTEngine",
    "TransformHandle",
    "ENGINES",
    "register_engine",
    "fir_window",
    "prepare_window",
    "SynthesisConfig",
    "build_plan",
    "load_synthesis_config",
    "parse_synthesis_config",
    "load_yaml",
    "save_yaml",
    "JsonlLogger",
    "Status",
    "status_of",
    "GaborError",
    "NullArgumentError",
    "InvalidSizeError",
    "InvalidLengthError",
    "InvalidArgumentError",
    "InvalidConventionError",
    "EngineInitError",
    "OutOfMemoryError",
    "InvalidHandleError",
    "PlanBusyError",
]
