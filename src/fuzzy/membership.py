"""
Membership Functions

Trapezoidal and triangular shapes used by input variables and the output universe.
Both are immutable and side-effect free, so a single instance can be evaluated
from any number of threads.
"""
from dataclasses import dataclass
from typing import Sequence, Tuple
import math
import numbers

from .errors import ConfigurationError


def _clamp01(x: float) -> float:
    if x <= 0.0:
        return 0.0
    elif x >= 1.0:
        return 1.0
    return x


def _check_params(kind: str, params: Sequence[float]) -> None:
    for p in params:
        if isinstance(p, bool) or not isinstance(p, numbers.Real) or not math.isfinite(p):
            raise ConfigurationError(f"{kind} parameters must be finite numbers, got {tuple(params)}")
    if any(left > right for left, right in zip(params, params[1:])):
        raise ConfigurationError(f"{kind} parameters must be ordered, got {tuple(params)}")


class MembershipFunction:
    """Maps a crisp value to a degree in [0, 1]"""

    kind = "abstract"

    def evaluate(self, x: float) -> float:
        raise NotImplementedError

    def support(self) -> Tuple[float, float]:
        raise NotImplementedError

    def params(self) -> Tuple[float, ...]:
        raise NotImplementedError

    def __call__(self, x: float) -> float:
        return self.evaluate(x)


@dataclass(frozen=True)
class Trapezoid(MembershipFunction):
    """
    Trapezoidal membership function

    Args:
        a: Left foot (membership = 0)
        b: Start of the flat top
        c: End of the flat top
        d: Right foot (membership = 0)

    a == b or c == d give a shoulder: the missing ramp is treated as 1.
    """
    a: float
    b: float
    c: float
    d: float

    kind = "trapezoid"

    def __post_init__(self):
        _check_params("Trapezoid", (self.a, self.b, self.c, self.d))

    def evaluate(self, x: float) -> float:
        a, b, c, d = self.a, self.b, self.c, self.d

        if x <= a or x >= d:
            return 0.0

        if b <= x <= c:
            return 1.0

        # Rising edge
        if x < b:
            return 1.0 if a == b else _clamp01((x - a) / (b - a))

        # Falling edge
        return 1.0 if c == d else _clamp01((d - x) / (d - c))

    def support(self) -> Tuple[float, float]:
        return (self.a, self.d)

    def params(self) -> Tuple[float, ...]:
        return (self.a, self.b, self.c, self.d)


@dataclass(frozen=True)
class Triangle(MembershipFunction):
    """
    Triangular membership function with the peak at b
    """
    a: float
    b: float
    c: float

    kind = "triangle"

    def __post_init__(self):
        _check_params("Triangle", (self.a, self.b, self.c))

    def evaluate(self, x: float) -> float:
        a, b, c = self.a, self.b, self.c

        if x <= a or x >= c:
            return 0.0
        if x == b:
            return 1.0
        if x < b:
            return _clamp01((x - a) / (b - a))
        return _clamp01((c - x) / (c - b))

    def support(self) -> Tuple[float, float]:
        return (self.a, self.c)

    def params(self) -> Tuple[float, ...]:
        return (self.a, self.b, self.c)


MF_KINDS = {
    "trapezoid": (Trapezoid, 4),
    "triangle": (Triangle, 3),
}


def membership_from_spec(kind: str, params: Sequence[float]) -> MembershipFunction:
    """
    Build a membership function from its declarative description

    Args:
        kind: "trapezoid" or "triangle" (also accepts "trap"/"tri")
        params: 4 or 3 ordered numbers

    Returns:
        MembershipFunction instance

    Raises:
        ConfigurationError: unknown kind, wrong arity or unordered parameters
    """
    key = (kind or "").strip().lower()
    key = {"trap": "trapezoid", "trapmf": "trapezoid", "tri": "triangle", "trimf": "triangle"}.get(key, key)
    if key not in MF_KINDS:
        raise ConfigurationError(f"Unknown membership function kind '{kind}'")

    cls, arity = MF_KINDS[key]
    params = tuple(params)
    if len(params) != arity:
        raise ConfigurationError(f"{cls.__name__} expects {arity} parameters, got {len(params)}")
    return cls(*params)
