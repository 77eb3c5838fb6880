"""
Fuzzy Variables

Input variables (VariableDomain) fuzzify one crisp reading into a vector of
term degrees. The OutputDomain discretizes the output universe and keeps every
output term pre-sampled on that grid.
"""
from dataclasses import dataclass, field
from typing import Sequence, Tuple
import math

import numpy as np

from .errors import ConfigurationError, InvalidVariableValue
from .membership import MembershipFunction


@dataclass(frozen=True)
class Term:
    """A linguistic term ("low", "warm", ...) and its membership function"""
    name: str
    mf: MembershipFunction


def _check_terms(owner: str, terms: Sequence[Term]) -> Tuple[Term, ...]:
    terms = tuple(terms)
    if not terms:
        raise ConfigurationError(f"'{owner}' must define at least one term")

    seen = set()
    for term in terms:
        if not term.name:
            raise ConfigurationError(f"'{owner}' has a term without a name")
        if term.name in seen:
            raise ConfigurationError(f"'{owner}' defines term '{term.name}' more than once")
        seen.add(term.name)
    return terms


@dataclass(frozen=True)
class VariableDomain:
    """
    Named input variable with an ordered list of terms

    Term order matters: rule selectors address terms by 1-based position.
    """
    name: str
    terms: Tuple[Term, ...]

    def __post_init__(self):
        if not self.name:
            raise ConfigurationError("Variable name must not be empty")
        object.__setattr__(self, "terms", _check_terms(self.name, self.terms))

    @property
    def term_names(self) -> Tuple[str, ...]:
        return tuple(t.name for t in self.terms)

    def __len__(self) -> int:
        return len(self.terms)

    def term_index(self, name: str) -> int:
        """1-based index of a term, as used by rule selectors"""
        for i, term in enumerate(self.terms, start=1):
            if term.name == name:
                return i
        raise KeyError(f"Variable '{self.name}' has no term '{name}'")

    def fuzzify(self, x: float) -> Tuple[float, ...]:
        """
        Evaluate every term against x

        Degrees are independent and need not sum to 1. A value outside
        every term's support yields an all-zero vector.

        Raises:
            InvalidVariableValue: x is NaN or infinite
        """
        if not math.isfinite(x):
            raise InvalidVariableValue(self.name, x)
        return tuple(t.mf.evaluate(x) for t in self.terms)


@dataclass(frozen=True)
class OutputDomain:
    """
    Discretized output universe

    Args:
        name: Output variable name (e.g. "apparent_temperature")
        minimum: Lower bound of the universe
        maximum: Upper bound of the universe
        resolution: Number of samples N; same N gives the same crisp output
        terms: Ordered output terms
    """
    name: str
    minimum: float
    maximum: float
    resolution: int
    terms: Tuple[Term, ...]
    universe: np.ndarray = field(init=False, repr=False, compare=False)
    curves: np.ndarray = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        if not (math.isfinite(self.minimum) and math.isfinite(self.maximum)):
            raise ConfigurationError(f"Output '{self.name}' bounds must be finite")
        if self.minimum >= self.maximum:
            raise ConfigurationError(
                f"Output '{self.name}' needs min < max, got [{self.minimum}, {self.maximum}]"
            )
        if isinstance(self.resolution, bool) or int(self.resolution) != self.resolution or self.resolution < 2:
            raise ConfigurationError(f"Output '{self.name}' resolution must be an integer >= 2")

        terms = _check_terms(self.name, self.terms)
        resolution = int(self.resolution)

        universe = np.linspace(float(self.minimum), float(self.maximum), resolution)
        curves = np.array(
            [[t.mf.evaluate(float(y)) for y in universe] for t in terms],
            dtype=float,
        )
        universe.setflags(write=False)
        curves.setflags(write=False)

        object.__setattr__(self, "terms", terms)
        object.__setattr__(self, "resolution", resolution)
        object.__setattr__(self, "universe", universe)
        object.__setattr__(self, "curves", curves)

    @property
    def term_names(self) -> Tuple[str, ...]:
        return tuple(t.name for t in self.terms)

    def term_index(self, name: str) -> int:
        """1-based index of an output term"""
        for i, term in enumerate(self.terms, start=1):
            if term.name == name:
                return i
        raise KeyError(f"Output '{self.name}' has no term '{name}'")

    def curve(self, index: int) -> np.ndarray:
        """Pre-sampled curve of the term at 1-based index"""
        return self.curves[index - 1]
