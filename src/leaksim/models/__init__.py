"""
Leakage models.

Importing this package registers every available model:

- hamming_weight (HammingWeightModel): HW of operand 1, no coefficients
- power (PowerModel): weighted operand and bit-flip interactions

Third-party packages add models through the ``leaksim.models`` entry-point
group; each entry point names a module whose import registers its models.
"""

from __future__ import annotations

import logging
from importlib.metadata import entry_points
from typing import List

from leaksim.coefficients import CoefficientSource
from leaksim.execution import ExecutionTrace
from leaksim.models.base import Model
from leaksim.models.registry import ModelRegistry, default_registry, register_model
from leaksim.models.hamming_weight import HammingWeightModel
from leaksim.models.power import PowerModel

logger = logging.getLogger(__name__)

PLUGIN_GROUP = "leaksim.models"


def _load_plugins() -> None:
    for entry_point in entry_points(group=PLUGIN_GROUP):
        logger.debug(f"Loading model plugin {entry_point.name!r}")
        entry_point.load()


_load_plugins()
default_registry.seal()


def available_models() -> List[str]:
    return default_registry.names()


def create_model(
    name: str,
    execution: ExecutionTrace,
    coefficients: CoefficientSource,
) -> Model:
    """Construct a registered model by name."""
    return default_registry.create(name, execution, coefficients)


__all__ = [
    "HammingWeightModel",
    "Model",
    "ModelRegistry",
    "PowerModel",
    "available_models",
    "create_model",
    "default_registry",
    "register_model",
]
