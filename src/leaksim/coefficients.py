"""
Coefficient Source - per-opcode, per-term weight vectors.

Coefficients are measured and calibrated elsewhere. This module holds them in
memory and serves one 32-entry vector per (opcode, interaction term).

Coefficients file format (JSON):
    {"eors": {"Operand1_Interactions": [0.01, ..., 0.02],
              "BitFlip1_Interactions": [...]},
     "adds": {...}}
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, FrozenSet, Iterable, Mapping, Protocol, Tuple, Union

from leaksim.bits import WORD_BITS
from leaksim.errors import ConfigurationError

logger = logging.getLogger(__name__)

COEFFICIENT_VECTOR_LENGTH = WORD_BITS


class CoefficientSource(Protocol):
    """Boundary consumed by the leakage models."""

    def coefficients_for(self, opcode: str, term: str) -> Tuple[float, ...]:
        """Raises ConfigurationError or LookupError for an unknown pair."""
        ...


class Coefficients:
    """
    In-memory coefficient table.

    Example:
        >>> coefficients = Coefficients({"eors": {"Operand1_Interactions": [1.0] * 32}})
        >>> coefficients.has_coefficients("eors", "Operand1_Interactions")
        True
    """

    def __init__(self, table: Mapping[str, Mapping[str, Iterable[float]]]):
        """
        Args:
            table: opcode -> term -> coefficient vector

        Raises:
            ConfigurationError: If a vector is not 32 numbers long
        """
        self._table: Dict[str, Dict[str, Tuple[float, ...]]] = {}

        for opcode, terms in table.items():
            self._table[opcode] = {}
            for term, vector in terms.items():
                self._table[opcode][term] = _to_vector(opcode, term, vector)

    def coefficients_for(self, opcode: str, term: str) -> Tuple[float, ...]:
        """
        Coefficient vector for an (opcode, term) pair.

        Raises:
            ConfigurationError: If the pair is not configured
        """
        try:
            return self._table[opcode][term]
        except KeyError:
            raise ConfigurationError(
                f"No coefficients for opcode {opcode!r}, term {term!r}"
            ) from None

    def has_coefficients(self, opcode: str, term: str) -> bool:
        return term in self._table.get(opcode, {})

    def opcodes(self) -> FrozenSet[str]:
        return frozenset(self._table)

    def terms(self, opcode: str) -> FrozenSet[str]:
        return frozenset(self._table.get(opcode, {}))

    def to_dict(self) -> Dict[str, Dict[str, list]]:
        """Convert to dictionary for JSON serialization."""
        return {
            opcode: {term: list(vector) for term, vector in terms.items()}
            for opcode, terms in self._table.items()
        }

    @classmethod
    def from_dict(cls, data: Any) -> "Coefficients":
        if not isinstance(data, dict) or not all(isinstance(t, dict) for t in data.values()):
            raise ConfigurationError("Coefficients must map opcode -> term -> vector")
        return cls(data)

    @classmethod
    def load_json(cls, path: Union[str, Path]) -> "Coefficients":
        """Load coefficients from a JSON file."""
        path = Path(path)
        try:
            data = json.loads(path.read_text())
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Coefficients file {path} is not valid JSON: {e}") from e

        coefficients = cls.from_dict(data)
        logger.debug(f"Loaded coefficients for {len(coefficients.opcodes())} opcodes from {path}")
        return coefficients


def _to_vector(opcode: str, term: str, vector: Iterable[float]) -> Tuple[float, ...]:
    try:
        values = tuple(float(c) for c in vector)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(
            f"Coefficients for ({opcode!r}, {term!r}) are not numeric: {e}"
        ) from e

    if len(values) != COEFFICIENT_VECTOR_LENGTH:
        raise ConfigurationError(
            f"Coefficients for ({opcode!r}, {term!r}) have {len(values)} entries, "
            f"expected {COEFFICIENT_VECTOR_LENGTH}"
        )
    return values
