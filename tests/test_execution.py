"""
Tests for the in-memory execution trace accessor.
"""

import json

import pytest

from leaksim.errors import TraceCorruptionError
from leaksim.execution import (
    EXECUTE_STAGE,
    InMemoryExecution,
    InstructionSnapshot,
    parse_immediate,
)


@pytest.fixture
def execution():
    return InMemoryExecution.from_dict({"cycles": [
        {
            "registers": {"r0": 6, "r1": 0xFFFFFFFF},
            "stages": {
                "Execute": {"opcode": "eors", "operands": ["r0", "r1"]},
                "Decode": "stall",
            },
        },
        {"registers": {"r0": 6}, "stages": {"Execute": "flush"}},
        {"registers": {}, "stages": {}},
    ]})


class TestAccessor:
    """Tests for the accessor operations."""

    def test_cycle_count(self, execution):
        assert execution.cycle_count() == 3

    def test_stage_states(self, execution):
        assert execution.is_normal_state(0, EXECUTE_STAGE)
        assert not execution.is_normal_state(0, "Decode")
        assert not execution.is_normal_state(1, EXECUTE_STAGE)

    def test_missing_stage_is_stall(self, execution):
        assert not execution.is_normal_state(2, EXECUTE_STAGE)
        assert not execution.is_normal_state(0, "Fetch")

    def test_instruction_at(self, execution):
        instruction = execution.instruction_at(0, EXECUTE_STAGE)
        assert instruction == InstructionSnapshot("eors", ("r0", "r1"))
        assert str(instruction) == "eors r0, r1"

    def test_instruction_at_abnormal_stage(self, execution):
        with pytest.raises(TraceCorruptionError):
            execution.instruction_at(1, EXECUTE_STAGE)

    def test_register_operands(self, execution):
        instruction = execution.instruction_at(0, EXECUTE_STAGE)
        assert execution.operand_value(0, instruction, 1) == 6
        assert execution.operand_value(0, instruction, 2) == 0xFFFFFFFF

    def test_immediate_operand(self, execution):
        instruction = InstructionSnapshot("adds", ("r0", "#0x10"))
        assert execution.operand_value(0, instruction, 2) == 16

    @pytest.mark.parametrize("cycle", [-1, 3, 100])
    def test_cycle_out_of_range(self, execution, cycle):
        with pytest.raises(TraceCorruptionError):
            execution.is_normal_state(cycle, EXECUTE_STAGE)

    def test_unresolvable_operand(self, execution):
        instruction = InstructionSnapshot("adds", ("r9",))
        with pytest.raises(TraceCorruptionError, match="r9"):
            execution.operand_value(0, instruction, 1)

    def test_operand_index_out_of_range(self, execution):
        instruction = execution.instruction_at(0, EXECUTE_STAGE)
        with pytest.raises(TraceCorruptionError):
            execution.operand_value(0, instruction, 3)


class TestParseImmediate:
    """Tests for immediate literal parsing."""

    @pytest.mark.parametrize("text, expected", [
        ("#5", 5),
        ("0x1F", 31),
        ("#0b1011", 11),
        ("#-1", 0xFFFFFFFF),
        (" 42 ", 42),
    ])
    def test_literals(self, text, expected):
        assert parse_immediate(text) == expected

    def test_not_a_literal(self):
        with pytest.raises(ValueError):
            parse_immediate("lr")


class TestLoading:
    """Tests for loading traces."""

    def test_load_json(self, tmp_path):
        path = tmp_path / "trace.json"
        path.write_text(json.dumps({"cycles": [
            {"registers": {"r3": -2}, "stages": {"Execute": {"opcode": "lsls", "operands": ["r3", "#1"]}}},
        ]}))

        execution = InMemoryExecution.load_json(path)

        instruction = execution.instruction_at(0, EXECUTE_STAGE)
        assert execution.operand_value(0, instruction, 1) == 0xFFFFFFFE

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "trace.json"
        path.write_text("{not json")
        with pytest.raises(TraceCorruptionError):
            InMemoryExecution.load_json(path)

    def test_normal_stage_without_instruction(self):
        data = {"cycles": [
            {"stages": {"Execute": "stall"}},
            {"stages": {"Execute": "normal"}},
        ]}
        with pytest.raises(TraceCorruptionError, match="Malformed cycle 1"):
            InMemoryExecution.from_dict(data)

    @pytest.mark.parametrize("data", [
        {},
        {"cycles": "nope"},
        {"cycles": [{"stages": {"Execute": {"operands": ["r0"]}}}]},
        {"cycles": [{"stages": {"Execute": "halted"}}]},
        {"cycles": [{"registers": {"r0": "six"}}]},
    ])
    def test_malformed_trace(self, data):
        with pytest.raises(TraceCorruptionError):
            InMemoryExecution.from_dict(data)
