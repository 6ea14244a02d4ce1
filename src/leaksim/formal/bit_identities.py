"""
Bit Identity Verifier - prove the bit-interaction identities for every input.

The leakage models rely on a few identities of the bit-interaction helpers.
Testing samples a handful of values; this module proves them for every value
of the word width with Z3 bit-vector logic.

Identities:
    pairs(v)       = HW(v)·(HW(v) - 1) / 2       (pair predicate from leaksim.bits)
    flip(a, b)     = flip(b, a)                   (flip helper from leaksim.bits)
    flip(a, a)     = 0
    flip(a, ¬a)    = 2^W - 1

Each identity is negated and handed to the solver:
    UNSAT = identity holds for all inputs, SAT = counterexample found.

Usage:
    from leaksim.formal import BitIdentityVerifier

    verifier = BitIdentityVerifier(width=32)
    report = verifier.prove_all()
    print(report.summary())

Requirements:
    - Z3 Python bindings (pip install z3-solver)
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from leaksim.bits import WORD_BITS, both_set, flip_bits, popcount_pairs
from leaksim.errors import FormalCheckError

logger = logging.getLogger(__name__)


# =============================================================================
# Dataclasses
# =============================================================================

@dataclass
class IdentityProofResult:
    """Outcome of proving one identity."""
    name: str
    holds: bool
    status: str  # "proved", "refuted", "unknown"
    counterexample: Optional[Dict[str, int]] = None
    time_seconds: float = 0.0
    explanation: str = ""

    def __str__(self) -> str:
        return f"IdentityProofResult({self.name}: {self.status})"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "name": self.name,
            "holds": self.holds,
            "status": self.status,
            "counterexample": self.counterexample,
            "time_seconds": self.time_seconds,
            "explanation": self.explanation,
        }


@dataclass
class BitIdentityReport:
    """Results for all identities at one word width."""
    width: int
    results: List[IdentityProofResult] = field(default_factory=list)
    time_seconds: float = 0.0

    @property
    def all_hold(self) -> bool:
        return all(r.holds for r in self.results)

    def summary(self) -> str:
        """Generate human-readable summary."""
        lines = [
            "=" * 60,
            "BIT IDENTITY VERIFICATION REPORT",
            "=" * 60,
            f"Word width: {self.width} bits",
            f"Identities checked: {len(self.results)}",
            f"Overall status: {'PROVED' if self.all_hold else 'FAILED'}",
            f"Verification time: {self.time_seconds:.2f}s",
        ]
        for r in self.results:
            lines.append(f"  - {r.name}: {r.status.upper()}")
            if r.counterexample:
                lines.append(f"    Counterexample: {r.counterexample}")
        return "\n".join(lines)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "width": self.width,
            "all_hold": self.all_hold,
            "time_seconds": self.time_seconds,
            "results": [r.to_dict() for r in self.results],
        }


# =============================================================================
# BitIdentityVerifier Class
# =============================================================================

class BitIdentityVerifier:
    """
    Proves the bit-interaction identities with Z3.

    Example:
        >>> verifier = BitIdentityVerifier(width=16)
        >>> verifier.prove_popcount_pairs_closed_form().status
        'proved'
    """

    def __init__(self, width: int = WORD_BITS, timeout: int = 120):
        """
        Args:
            width: Word width in bits
            timeout: Solver timeout per identity (seconds)

        Raises:
            ValueError: If width is not between 2 and 32
        """
        if not 2 <= width <= WORD_BITS:
            raise ValueError(f"Width must be between 2 and {WORD_BITS}, got {width}")

        self.width = width
        self.timeout = timeout
        self._z3_module = None

    def _import_z3(self) -> Any:
        """Import z3 module lazily."""
        if self._z3_module is None:
            try:
                import z3
                self._z3_module = z3
            except ImportError as e:
                raise FormalCheckError(
                    "Z3 Python bindings not found. Install with: pip install z3-solver"
                ) from e
        return self._z3_module

    # =========================================================================
    # Solving
    # =========================================================================

    def _refute(
        self,
        name: str,
        negated_identity: Any,
        variables: Dict[str, Any],
        explain: Callable[[Dict[str, int]], str] = lambda cex: "",
    ) -> IdentityProofResult:
        """Search for inputs violating an identity."""
        z3 = self._import_z3()
        start_time = time.time()

        solver = z3.Solver()
        solver.set("timeout", self.timeout * 1000)
        solver.add(negated_identity)

        result = solver.check()
        elapsed = time.time() - start_time

        if result == z3.unsat:
            logger.info(f"{name}: proved for all {self.width}-bit inputs ({elapsed:.2f}s)")
            return IdentityProofResult(
                name=name,
                holds=True,
                status="proved",
                time_seconds=elapsed,
                explanation=f"No {self.width}-bit inputs violate the identity.",
            )

        if result == z3.sat:
            model = solver.model()
            counterexample = {
                var_name: model.eval(var, model_completion=True).as_long()
                for var_name, var in variables.items()
            }
            logger.warning(f"{name}: refuted by {counterexample}")
            return IdentityProofResult(
                name=name,
                holds=False,
                status="refuted",
                counterexample=counterexample,
                time_seconds=elapsed,
                explanation=explain(counterexample),
            )

        return IdentityProofResult(
            name=name,
            holds=False,
            status="unknown",
            time_seconds=elapsed,
            explanation=f"Solver returned unknown: {solver.reason_unknown()}",
        )

    # =========================================================================
    # Identities
    # =========================================================================

    def prove_popcount_pairs_closed_form(self) -> IdentityProofResult:
        """Prove pairs(v) = C(HW(v), 2) using the engine's pair predicate."""
        z3 = self._import_z3()
        width = self.width

        # Wide enough for HW·(HW - 1).
        count_width = (width * (width - 1)).bit_length() + 1
        one = z3.BitVecVal(1, count_width)
        zero = z3.BitVecVal(0, count_width)

        v = z3.BitVec("v", width)
        bits = [z3.Extract(i, i, v) for i in range(width)]

        hw = z3.Sum([z3.ZeroExt(count_width - 1, b) for b in bits])
        pairs = z3.Sum([
            z3.If(both_set(bits[i], bits[j]), one, zero)
            for i in range(width)
            for j in range(i + 1, width)
        ])
        closed_form = z3.LShR(hw * (hw - 1), 1)

        def explain(cex: Dict[str, int]) -> str:
            value = cex["v"]
            hw_value = bin(value).count("1")
            return (
                f"v={value:#x}: popcount_pairs={popcount_pairs(value)}, "
                f"C(HW, 2)={hw_value * (hw_value - 1) // 2}"
            )

        return self._refute("popcount_pairs_closed_form", pairs != closed_form, {"v": v}, explain)

    def prove_bitflip_symmetric(self) -> IdentityProofResult:
        z3 = self._import_z3()
        a = z3.BitVec("a", self.width)
        b = z3.BitVec("b", self.width)
        return self._refute("bitflip_symmetric", flip_bits(a, b) != flip_bits(b, a), {"a": a, "b": b})

    def prove_bitflip_self_zero(self) -> IdentityProofResult:
        z3 = self._import_z3()
        a = z3.BitVec("a", self.width)
        return self._refute("bitflip_self_zero", flip_bits(a, a) != 0, {"a": a})

    def prove_bitflip_complement(self) -> IdentityProofResult:
        z3 = self._import_z3()
        a = z3.BitVec("a", self.width)
        all_ones = z3.BitVecVal((1 << self.width) - 1, self.width)
        return self._refute("bitflip_complement", flip_bits(a, ~a) != all_ones, {"a": a})

    def prove_all(self) -> BitIdentityReport:
        """Prove every identity at this width."""
        start_time = time.time()
        results = [
            self.prove_popcount_pairs_closed_form(),
            self.prove_bitflip_symmetric(),
            self.prove_bitflip_self_zero(),
            self.prove_bitflip_complement(),
        ]
        return BitIdentityReport(
            width=self.width,
            results=results,
            time_seconds=time.time() - start_time,
        )


# =============================================================================
# Functional API
# =============================================================================

def verify_bit_identities(width: int = WORD_BITS, timeout: int = 120) -> BitIdentityReport:
    """
    Prove all bit-interaction identities.

    Example:
        >>> report = verify_bit_identities(width=8)
        >>> report.all_hold
        True
    """
    return BitIdentityVerifier(width=width, timeout=timeout).prove_all()
