"""
Error taxonomy for leakage modeling.

Configuration problems are caught before any trace is generated; trace
corruption aborts generation as soon as it is detected. A stalled or flushed
pipeline stage is not an error and never raises.
"""


class LeakageModelError(Exception):
    """Base error for leakage modeling."""
    pass


class ConfigurationError(LeakageModelError):
    """Model, registry or coefficients are misconfigured."""
    pass


class RegistrationError(ConfigurationError):
    """A model name collides, or registration happened after startup."""
    pass


class TraceCorruptionError(LeakageModelError):
    """The execution trace holds an invalid cycle, instruction or operand."""
    pass


class FormalCheckError(LeakageModelError):
    """Error while running a formal bit-identity check."""
    pass
