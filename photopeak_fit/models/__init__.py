from .peak_model import (
    PeakShape, background, gaussian, lorentzian, build_model, peak_components,
    parameter_count, MAX_PEAKS,
)

__all__ = [
    "PeakShape", "background", "gaussian", "lorentzian", "build_model",
    "peak_components", "parameter_count", "MAX_PEAKS",
]
