"""
Model contract for leakage trace generation.

A model borrows an execution trace and a coefficient source for its whole
lifetime, checks at construction that the coefficients supply every
interaction term it needs, and turns the trace into one leakage sample per
clock cycle.

New models subclass ``Model`` and register themselves by name:

    from leaksim.models.base import Model
    from leaksim.models.registry import register_model

    @register_model("my_model")
    class MyModel(Model):
        required_interaction_terms = frozenset({"Operand1_Interactions"})

        def generate_traces(self):
            ...
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import ClassVar, FrozenSet, List, Set

from leaksim.coefficients import CoefficientSource
from leaksim.errors import ConfigurationError
from leaksim.execution import EXECUTE_STAGE, ExecutionTrace, InstructionSnapshot

logger = logging.getLogger(__name__)


class Model(ABC):
    """
    Abstract leakage model.

    Attributes:
        name: Registry name, set when the class is registered
        required_interaction_terms: Terms the coefficients must provide for
            every opcode the model encounters
    """

    name: ClassVar[str] = ""
    required_interaction_terms: ClassVar[FrozenSet[str]] = frozenset()

    def __init__(self, execution: ExecutionTrace, coefficients: CoefficientSource):
        """
        Args:
            execution: Execution trace accessor (borrowed)
            coefficients: Coefficient source (borrowed)

        Raises:
            ConfigurationError: If a required term is missing for a relevant opcode
        """
        self._execution = execution
        self._coefficients = coefficients
        self.check_interaction_terms()

    @abstractmethod
    def generate_traces(self) -> List[float]:
        """Leakage samples, one per cycle, in cycle order."""
        raise NotImplementedError

    def get_interaction_terms(self) -> FrozenSet[str]:
        return self.required_interaction_terms

    def relevant_opcodes(self) -> Set[str]:
        """Opcodes found in the Execute stage during normal cycles."""
        opcodes = set()
        for cycle in range(self._execution.cycle_count()):
            if self._execution.is_normal_state(cycle, EXECUTE_STAGE):
                opcodes.add(self._execution.instruction_at(cycle, EXECUTE_STAGE).opcode)
        return opcodes

    def check_interaction_terms(self) -> None:
        """
        Verify the coefficients cover every required (opcode, term) pair.

        Raises:
            ConfigurationError: Listing every missing pair
        """
        terms = self.get_interaction_terms()
        if not terms:
            return

        missing = [
            (opcode, term)
            for opcode in sorted(self.relevant_opcodes())
            for term in sorted(terms)
            if not self._has_coefficients(opcode, term)
        ]

        if missing:
            pairs = ", ".join(f"{opcode}/{term}" for opcode, term in missing)
            raise ConfigurationError(
                f"Model {self.name or type(self).__name__!r} was not provided with "
                f"required interaction terms by the coefficients: {pairs}"
            )

        logger.debug(f"Interaction terms satisfied for {type(self).__name__}")

    def _has_coefficients(self, opcode: str, term: str) -> bool:
        try:
            self._coefficients.coefficients_for(opcode, term)
        except (ConfigurationError, LookupError):
            return False
        return True

    def resolve_operand(
        self,
        cycle: int,
        instruction: InstructionSnapshot,
        operand_index: int,
    ) -> int:
        """Value of a 1-based operand, or 0 if the instruction has no such operand."""
        if operand_index > len(instruction.operands):
            return 0
        return self._execution.operand_value(cycle, instruction, operand_index)
