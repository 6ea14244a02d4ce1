"""
Leakage trace results and generation entry point.

Usage:
    from leaksim import generate, InMemoryExecution, Coefficients

    trace = generate(
        "power",
        InMemoryExecution.load_json("trace.json"),
        Coefficients.load_json("coefficients.json"),
    )
    print(trace.summary())
    trace.save_json("leakage.json")
"""

from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from leaksim.coefficients import CoefficientSource
from leaksim.execution import ExecutionTrace
from leaksim.models import ModelRegistry, default_registry

logger = logging.getLogger(__name__)


@dataclass
class LeakageTrace:
    """Samples produced by one model run."""
    model: str
    """Registry name of the model."""

    samples: List[float] = field(default_factory=list)
    """One sample per cycle, in cycle order."""

    time_seconds: float = 0.0
    """Generation time, including term validation."""

    def __len__(self) -> int:
        return len(self.samples)

    def summary(self) -> str:
        """Generate human-readable summary."""
        lines = [
            f"Model: {self.model}",
            f"Cycles: {len(self.samples)}",
        ]
        if self.samples:
            lines.append(f"Min/max sample: {min(self.samples):.4f} / {max(self.samples):.4f}")
            lines.append(f"Mean sample: {sum(self.samples) / len(self.samples):.4f}")
        lines.append(f"Time: {self.time_seconds:.2f}s")
        return "\n".join(lines)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "model": self.model,
            "cycle_count": len(self.samples),
            "samples": list(self.samples),
            "time_seconds": self.time_seconds,
        }

    def save_json(self, path: Union[str, Path]) -> None:
        with open(path, "w") as f:
            json.dump(self.to_dict(), f, indent=2)


def generate(
    model_name: str,
    execution: ExecutionTrace,
    coefficients: CoefficientSource,
    registry: Optional[ModelRegistry] = None,
) -> LeakageTrace:
    """
    Create the named model and generate its leakage trace.

    Raises:
        ConfigurationError: Unknown model or missing coefficients
        TraceCorruptionError: Malformed execution trace
    """
    registry = registry or default_registry
    start_time = time.time()

    model = registry.create(model_name, execution, coefficients)
    logger.info(f"Generating {model_name!r} leakage for {execution.cycle_count()} cycles...")
    samples = model.generate_traces()

    elapsed = time.time() - start_time
    logger.info(f"Generated {len(samples)} samples in {elapsed:.2f}s")
    return LeakageTrace(model=model_name, samples=samples, time_seconds=elapsed)
