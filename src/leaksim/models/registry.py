"""
Model Registry - name -> constructor catalog.

Models register themselves with the ``register_model`` decorator when their
module is imported. Importing ``leaksim.models`` is the startup phase: it
imports the built-in models, loads plugin models advertised under the
``leaksim.models`` entry-point group, and seals the default registry. After
sealing the registry is read-only.
"""

from __future__ import annotations

import logging
import threading
from typing import Callable, Dict, List, Type, TypeVar

from leaksim.coefficients import CoefficientSource
from leaksim.errors import ConfigurationError, RegistrationError
from leaksim.execution import ExecutionTrace
from leaksim.models.base import Model

logger = logging.getLogger(__name__)

ModelConstructor = Callable[[ExecutionTrace, CoefficientSource], Model]
M = TypeVar("M", bound=Type[Model])


class ModelRegistry:
    """
    Catalog of available models.

    Example:
        >>> registry = ModelRegistry()
        >>> registry.register("hamming_weight", HammingWeightModel)
        >>> model = registry.create("hamming_weight", execution, coefficients)
    """

    def __init__(self):
        self._constructors: Dict[str, ModelConstructor] = {}
        self._lock = threading.Lock()
        self._sealed = False

    @property
    def sealed(self) -> bool:
        return self._sealed

    def register(self, name: str, constructor: ModelConstructor) -> None:
        """
        Add a model constructor under ``name``.

        Registering the same constructor twice is a no-op.

        Raises:
            RegistrationError: On a name collision or after sealing
        """
        with self._lock:
            if self._sealed:
                raise RegistrationError(
                    f"Cannot register model {name!r}: registry is sealed"
                )

            existing = self._constructors.get(name)
            if existing is constructor:
                return
            if existing is not None:
                raise RegistrationError(
                    f"Model name {name!r} already registered by {existing!r}"
                )

            self._constructors[name] = constructor
            logger.debug(f"Registered model {name!r}")

    def seal(self) -> None:
        """End the registration phase."""
        with self._lock:
            self._sealed = True

    def get(self, name: str) -> ModelConstructor:
        """
        Raises:
            ConfigurationError: If no model is registered under ``name``
        """
        try:
            return self._constructors[name]
        except KeyError:
            available = ", ".join(self.names()) or "none"
            raise ConfigurationError(
                f"Unknown model {name!r}. Available models: {available}"
            ) from None

    def create(
        self,
        name: str,
        execution: ExecutionTrace,
        coefficients: CoefficientSource,
    ) -> Model:
        """Construct the model registered under ``name``."""
        return self.get(name)(execution, coefficients)

    def names(self) -> List[str]:
        return sorted(self._constructors)

    def __contains__(self, name: object) -> bool:
        return name in self._constructors

    def __len__(self) -> int:
        return len(self._constructors)


default_registry = ModelRegistry()


def register_model(name: str, registry: ModelRegistry = default_registry) -> Callable[[M], M]:
    """Class decorator registering a model under ``name``."""

    def decorator(cls: M) -> M:
        cls.name = name
        registry.register(name, cls)
        return cls

    return decorator
