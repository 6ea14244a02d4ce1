"""
Execution Trace Accessor - read-only view over per-cycle pipeline state.

The pipeline simulator that produces this state is external. This module
defines the accessor boundary the leakage models consume, and an in-memory
implementation that holds an already materialized trace.

Trace file format (JSON):
    {"cycles": [
        {"registers": {"r0": 6, "r1": 255},
         "stages": {"Execute": {"opcode": "eors", "operands": ["r0", "r1"]},
                    "Decode": "stall"}}
    ]}

A stage is either an instruction object (normal state) or one of the strings
"stall" / "flush". A stage missing from a cycle is treated as a stall.

Usage:
    from leaksim.execution import InMemoryExecution

    execution = InMemoryExecution.load_json("trace.json")
    for cycle in range(execution.cycle_count()):
        if execution.is_normal_state(cycle, "Execute"):
            instruction = execution.instruction_at(cycle, "Execute")
            value = execution.operand_value(cycle, instruction, 1)
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Protocol, Tuple, Union

from leaksim.bits import WORD_MASK
from leaksim.errors import TraceCorruptionError

logger = logging.getLogger(__name__)


# =============================================================================
# Constants
# =============================================================================

EXECUTE_STAGE = "Execute"


# =============================================================================
# Enums
# =============================================================================

class StageState(Enum):
    """Occupancy of a pipeline stage at one cycle."""
    NORMAL = "normal"
    """Stage holds a real instruction."""

    STALL = "stall"
    """Stage holds a bubble."""

    FLUSH = "flush"
    """Stage contents were discarded."""


# =============================================================================
# Dataclasses
# =============================================================================

@dataclass(frozen=True)
class InstructionSnapshot:
    """An instruction as it sits in a pipeline stage."""
    opcode: str
    """Opcode identifier, e.g. "adds"."""

    operands: Tuple[str, ...] = ()
    """Operand descriptors: register names or immediate literals."""

    def __str__(self) -> str:
        return f"{self.opcode} {', '.join(self.operands)}".strip()


@dataclass(frozen=True)
class StageSlot:
    """State of one pipeline stage at one cycle."""
    state: StageState
    instruction: Optional[InstructionSnapshot] = None


@dataclass(frozen=True)
class PipelineCycle:
    """Pipeline and register state at one clock cycle."""
    stages: Mapping[str, StageSlot] = field(default_factory=dict)
    registers: Mapping[str, int] = field(default_factory=dict)


# =============================================================================
# Accessor Protocol
# =============================================================================

class ExecutionTrace(Protocol):
    """Boundary consumed by the leakage models."""

    def cycle_count(self) -> int:
        ...

    def is_normal_state(self, cycle: int, stage: str) -> bool:
        ...

    def instruction_at(self, cycle: int, stage: str) -> InstructionSnapshot:
        ...

    def operand_value(
        self,
        cycle: int,
        instruction: InstructionSnapshot,
        operand_index: int,
    ) -> int:
        ...


# =============================================================================
# In-memory Implementation
# =============================================================================

def parse_immediate(text: str) -> int:
    """
    Parse an immediate literal into a 32-bit value.

    Accepts an optional leading "#", a sign, and Python integer literal
    prefixes (0x, 0b, 0o). Negative values wrap to two's complement.

    Raises:
        ValueError: If the text is not an integer literal
    """
    literal = text.strip()
    if literal.startswith("#"):
        literal = literal[1:]
    return int(literal, 0) & WORD_MASK


class InMemoryExecution:
    """
    Execution trace held fully in memory.

    Example:
        >>> cycle = PipelineCycle(
        ...     stages={"Execute": StageSlot(StageState.NORMAL, InstructionSnapshot("movs", ("#6",)))},
        ... )
        >>> execution = InMemoryExecution([cycle])
        >>> execution.operand_value(0, execution.instruction_at(0, "Execute"), 1)
        6
    """

    def __init__(self, cycles: List[PipelineCycle]):
        self._cycles = list(cycles)

    def __len__(self) -> int:
        return len(self._cycles)

    def _cycle(self, cycle: int) -> PipelineCycle:
        if not isinstance(cycle, int) or not 0 <= cycle < len(self._cycles):
            raise TraceCorruptionError(
                f"Cycle {cycle!r} out of range for trace of {len(self._cycles)} cycles"
            )
        return self._cycles[cycle]

    def _slot(self, cycle: int, stage: str) -> StageSlot:
        return self._cycle(cycle).stages.get(stage, StageSlot(StageState.STALL))

    # =========================================================================
    # Accessor API
    # =========================================================================

    def cycle_count(self) -> int:
        return len(self._cycles)

    def is_normal_state(self, cycle: int, stage: str) -> bool:
        return self._slot(cycle, stage).state is StageState.NORMAL

    def instruction_at(self, cycle: int, stage: str) -> InstructionSnapshot:
        slot = self._slot(cycle, stage)
        if slot.state is not StageState.NORMAL or slot.instruction is None:
            raise TraceCorruptionError(
                f"No instruction in stage {stage!r} at cycle {cycle} (state: {slot.state.value})"
            )
        return slot.instruction

    def operand_value(
        self,
        cycle: int,
        instruction: InstructionSnapshot,
        operand_index: int,
    ) -> int:
        """
        Resolve an operand against the register file at a cycle.

        Args:
            cycle: Cycle whose register state is used
            instruction: Instruction holding the operand
            operand_index: 1-based operand position

        Returns:
            Register value or immediate, as a 32-bit unsigned int

        Raises:
            TraceCorruptionError: If the operand does not exist or cannot be resolved
        """
        registers = self._cycle(cycle).registers

        if not 1 <= operand_index <= len(instruction.operands):
            raise TraceCorruptionError(
                f"Instruction '{instruction}' at cycle {cycle} has no operand {operand_index}"
            )

        operand = instruction.operands[operand_index - 1]
        if operand in registers:
            return registers[operand] & WORD_MASK

        try:
            return parse_immediate(operand)
        except ValueError as e:
            raise TraceCorruptionError(
                f"Cannot resolve operand {operand!r} of '{instruction}' at cycle {cycle}"
            ) from e

    # =========================================================================
    # Loading
    # =========================================================================

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "InMemoryExecution":
        """
        Build a trace from its JSON representation.

        Raises:
            TraceCorruptionError: If the structure is malformed
        """
        raw_cycles = data.get("cycles") if isinstance(data, dict) else None
        if not isinstance(raw_cycles, list):
            raise TraceCorruptionError("Trace must contain a 'cycles' list")

        cycles = []
        for index, raw in enumerate(raw_cycles):
            try:
                cycles.append(_parse_cycle(raw))
            except (TypeError, ValueError, KeyError, AttributeError) as e:
                raise TraceCorruptionError(f"Malformed cycle {index}: {e}") from e

        logger.debug(f"Loaded execution trace with {len(cycles)} cycles")
        return cls(cycles)

    @classmethod
    def load_json(cls, path: Union[str, Path]) -> "InMemoryExecution":
        """Load a trace from a JSON file."""
        path = Path(path)
        try:
            data = json.loads(path.read_text())
        except json.JSONDecodeError as e:
            raise TraceCorruptionError(f"Trace file {path} is not valid JSON: {e}") from e
        return cls.from_dict(data)


def _parse_slot(raw: Any) -> StageSlot:
    if isinstance(raw, str):
        state = StageState(raw.lower())
        if state is StageState.NORMAL:
            raise ValueError("a normal stage must hold an instruction object")
        return StageSlot(state)

    opcode = raw["opcode"]
    if not isinstance(opcode, str) or not opcode:
        raise ValueError(f"invalid opcode {opcode!r}")
    operands = tuple(str(op) for op in raw.get("operands", []))
    return StageSlot(StageState.NORMAL, InstructionSnapshot(opcode, operands))


def _parse_cycle(raw: Dict[str, Any]) -> PipelineCycle:
    registers = {}
    for name, value in raw.get("registers", {}).items():
        if not isinstance(value, int) or isinstance(value, bool):
            raise ValueError(f"register {name!r} holds non-integer {value!r}")
        registers[name] = value & WORD_MASK

    stages = {name: _parse_slot(slot) for name, slot in raw.get("stages", {}).items()}
    return PipelineCycle(stages=stages, registers=registers)
