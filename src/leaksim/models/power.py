"""
Power model - coefficient-weighted bit interactions of operands and bit flips.

Leakage Model:
    P_i = Σ_t  Σ_k  c_k(opcode_i, t) · f_t(i)

with features, for the instruction in the Execute stage at cycle i and the
one before it (i - 1):

    Operand1_Interactions = pairs(op1_i)
    Operand2_Interactions = pairs(op2_i)
    BitFlip1_Interactions = pairs(op1_i ⊕ op2_{i-1})
    BitFlip2_Interactions = pairs(op2_i ⊕ op2_{i-1})

where pairs(v) counts set-bit pairs of v. The first two capture the static
data-dependent component, the bit flips the switching component.

Stalled and flushed cycles emit 0 and count as all-zero operands for the
cycle that follows. Cycle 0 is compared against an all-zero record.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple

from leaksim.bits import bitflip, popcount_pairs, weighted_term
from leaksim.execution import EXECUTE_STAGE
from leaksim.models.base import Model
from leaksim.models.registry import register_model

logger = logging.getLogger(__name__)


# =============================================================================
# Intermediate Terms
# =============================================================================

@dataclass(frozen=True)
class InstructionTerms:
    """Terms of a single instruction, computed once per cycle."""
    opcode: Optional[str]
    """None for stalled or flushed cycles."""

    operands: Tuple[str, ...]
    operand_1: int
    operand_2: int
    operand_1_bit_interactions: int
    operand_2_bit_interactions: int

    @property
    def is_normal(self) -> bool:
        return self.opcode is not None

    @classmethod
    def build(
        cls,
        opcode: Optional[str],
        operands: Tuple[str, ...],
        operand_1: int,
        operand_2: int,
    ) -> "InstructionTerms":
        return cls(
            opcode=opcode,
            operands=operands,
            operand_1=operand_1,
            operand_2=operand_2,
            operand_1_bit_interactions=popcount_pairs(operand_1),
            operand_2_bit_interactions=popcount_pairs(operand_2),
        )

    @classmethod
    def empty(cls) -> "InstructionTerms":
        return cls(None, (), 0, 0, 0, 0)


@dataclass(frozen=True)
class InstructionInteractions:
    """Terms between an instruction and the one retired before it."""
    operand_1_bit_flip: int
    operand_2_bit_flip: int
    bit_flip_1_bit_interactions: int
    bit_flip_2_bit_interactions: int

    @classmethod
    def between(
        cls,
        current: InstructionTerms,
        previous: InstructionTerms,
    ) -> "InstructionInteractions":
        flip_1 = bitflip(current.operand_1, previous.operand_2)
        flip_2 = bitflip(current.operand_2, previous.operand_2)
        return cls(
            operand_1_bit_flip=flip_1,
            operand_2_bit_flip=flip_2,
            bit_flip_1_bit_interactions=popcount_pairs(flip_1),
            bit_flip_2_bit_interactions=popcount_pairs(flip_2),
        )


FeatureGetter = Callable[[InstructionTerms, InstructionInteractions], int]

TERM_FEATURES: Dict[str, FeatureGetter] = {
    "Operand1_Interactions": lambda terms, inter: terms.operand_1_bit_interactions,
    "Operand2_Interactions": lambda terms, inter: terms.operand_2_bit_interactions,
    "BitFlip1_Interactions": lambda terms, inter: inter.bit_flip_1_bit_interactions,
    "BitFlip2_Interactions": lambda terms, inter: inter.bit_flip_2_bit_interactions,
}


# =============================================================================
# Model
# =============================================================================

@register_model("power")
class PowerModel(Model):
    """
    Power consumption model over operand values and inter-instruction bit flips.

    Example:
        >>> model = PowerModel(execution, coefficients)
        >>> samples = model.generate_traces()
        >>> len(samples) == execution.cycle_count()
        True
    """

    required_interaction_terms = frozenset(TERM_FEATURES)

    def instruction_terms(self, cycle: int) -> InstructionTerms:
        """Operand values and their bit interactions at ``cycle``."""
        if not self._execution.is_normal_state(cycle, EXECUTE_STAGE):
            return InstructionTerms.empty()

        instruction = self._execution.instruction_at(cycle, EXECUTE_STAGE)
        return InstructionTerms.build(
            instruction.opcode,
            instruction.operands,
            self.resolve_operand(cycle, instruction, 1),
            self.resolve_operand(cycle, instruction, 2),
        )

    def calculate_term(self, opcode: str, term: str, feature_value: float) -> float:
        return weighted_term(self._coefficients.coefficients_for(opcode, term), feature_value)

    def sample(self, current: InstructionTerms, previous: InstructionTerms) -> float:
        """Leakage of ``current`` given the instruction retired before it."""
        if not current.is_normal:
            return 0.0

        interactions = InstructionInteractions.between(current, previous)

        total = 0.0
        for term in sorted(self.get_interaction_terms()):
            feature = TERM_FEATURES[term](current, interactions)
            total += self.calculate_term(current.opcode, term, feature)
        return total

    def generate_traces(self) -> List[float]:
        cycle_count = self._execution.cycle_count()

        # Per-instruction terms first; the fold below only needs one cycle of look-back.
        records = [self.instruction_terms(cycle) for cycle in range(cycle_count)]

        traces: List[float] = []
        previous = InstructionTerms.empty()
        for current in records:
            traces.append(self.sample(current, previous))
            previous = current

        logger.debug(f"Generated {len(traces)} power samples")
        return traces
