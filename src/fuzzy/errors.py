"""
Exceptions raised by the fuzzy inference engine
"""
from typing import Optional


class FuzzyError(Exception):
    """Base class for fuzzy engine errors"""


class ConfigurationError(FuzzyError, ValueError):
    """Raised when a configuration cannot be turned into an engine"""


class InvalidVariableValue(FuzzyError, ValueError):
    """Raised when a reading is not a number, or is NaN or infinite"""

    def __init__(self, variable: str, value: float, message: Optional[str] = None):
        self.variable = variable
        self.value = value
        super().__init__(message or f"Non-finite value for '{variable}': {value!r}")


class MissingVariable(FuzzyError, ValueError):
    """Raised when an input mapping lacks a configured variable"""

    def __init__(self, variable: str):
        self.variable = variable
        super().__init__(f"Missing input variable '{variable}'")


class UndefinedResult(FuzzyError):
    """Raised by InferenceResult.unwrap() when no rule fired"""
