"""Shared fixtures: small execution traces and coefficient tables."""

import pytest

from leaksim.coefficients import Coefficients
from leaksim.execution import InMemoryExecution
from leaksim.models.power import TERM_FEATURES


def _cycle(execute, registers=None):
    return {"registers": registers or {}, "stages": {"Execute": execute}}


@pytest.fixture
def build_execution():
    """Factory: build_execution([(execute_stage, registers), ...])."""

    def build(cycles):
        return InMemoryExecution.from_dict(
            {"cycles": [_cycle(execute, registers) for execute, registers in cycles]}
        )

    return build


@pytest.fixture
def scenario_execution(build_execution):
    """Stall, then operand 1 = 0b0110, then operand 1 = 0b1111."""
    return build_execution([
        ("stall", {}),
        ({"opcode": "movs", "operands": ["r0"]}, {"r0": 0b0110}),
        ({"opcode": "movs", "operands": ["r0"]}, {"r0": 0b1111}),
    ])


@pytest.fixture
def power_coefficients():
    """Distinct dyadic weights per term, so sums are exact."""
    weights = {
        "Operand1_Interactions": 1.0,
        "Operand2_Interactions": 0.5,
        "BitFlip1_Interactions": 0.25,
        "BitFlip2_Interactions": 1 / 32,
    }
    assert set(weights) == set(TERM_FEATURES)
    table = {
        opcode: {term: [w] * 32 for term, w in weights.items()}
        for opcode in ("eors", "adds", "movs")
    }
    return Coefficients(table)
