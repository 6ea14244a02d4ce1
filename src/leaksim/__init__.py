"""
leaksim: Synthetic side-channel leakage traces from simulated execution.

Estimate per-cycle power/EM leakage of a target program from its pipeline
trace, with no measurement hardware required.
"""

__version__ = "0.1.0"

from leaksim.coefficients import Coefficients
from leaksim.errors import (
    ConfigurationError,
    FormalCheckError,
    LeakageModelError,
    RegistrationError,
    TraceCorruptionError,
)
from leaksim.execution import InMemoryExecution, InstructionSnapshot
from leaksim.models import HammingWeightModel, Model, PowerModel, available_models, create_model
from leaksim.traces import LeakageTrace, generate

__all__ = [
    "Coefficients",
    "ConfigurationError",
    "FormalCheckError",
    "HammingWeightModel",
    "InMemoryExecution",
    "InstructionSnapshot",
    "LeakageModelError",
    "LeakageTrace",
    "Model",
    "PowerModel",
    "RegistrationError",
    "TraceCorruptionError",
    "available_models",
    "create_model",
    "generate",
    "__version__",
]
