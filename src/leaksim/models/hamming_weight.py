"""
Hamming weight model - leakage is the number of set bits of operand 1.

This is the minimal model, and the template other models follow. It needs
no coefficients.
"""

from __future__ import annotations

import logging
from typing import List

from leaksim.bits import hamming_weight
from leaksim.execution import EXECUTE_STAGE
from leaksim.models.base import Model
from leaksim.models.registry import register_model

logger = logging.getLogger(__name__)


@register_model("hamming_weight")
class HammingWeightModel(Model):
    """Leaks HW(operand 1) of the instruction in the Execute stage."""

    def generate_traces(self) -> List[float]:
        traces: List[float] = []

        for cycle in range(self._execution.cycle_count()):
            # Stalls and flushes leak nothing.
            if not self._execution.is_normal_state(cycle, EXECUTE_STAGE):
                traces.append(0.0)
                continue

            instruction = self._execution.instruction_at(cycle, EXECUTE_STAGE)
            traces.append(float(hamming_weight(self.resolve_operand(cycle, instruction, 1))))

        logger.debug(f"Generated {len(traces)} Hamming weight samples")
        return traces
