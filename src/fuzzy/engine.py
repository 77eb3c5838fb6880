"""
Fuzzy Inference Engine

Mamdani inference for apparent temperature:
fuzzification -> rule conjunction (min over non-don't-care selectors)
-> min-clipping of each rule's output term -> max aggregation
-> centroid defuzzification on the discretized output universe.

The engine is a pure function of (configuration, input vector). It holds no
mutable state, so one instance can serve any number of threads.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple
import logging
import math

import numpy as np

from .config import FuzzyConfiguration, NoMatchMode
from .errors import InvalidVariableValue, MissingVariable, UndefinedResult
from .rules import DONT_CARE, RuleActivation
from .variables import OutputDomain

logger = logging.getLogger(__name__)

# Aggregated mass at or below this is treated as "no rule fired"
ZERO_MASS = 1e-12


def aggregate(activations: Sequence[RuleActivation], output: OutputDomain) -> np.ndarray:
    """
    Pointwise maximum of the clipped output terms of all fired rules

    Args:
        activations: Rule strengths (alpha) with their output term index
        output: Output domain with pre-sampled term curves

    Returns:
        Aggregated membership curve, one value per universe sample
    """
    aggregated = np.zeros(output.resolution, dtype=float)
    for act in activations:
        if act.alpha <= 0.0:
            continue
        clipped = np.minimum(act.alpha, output.curve(act.output))
        np.maximum(aggregated, clipped, out=aggregated)
    return aggregated


def defuzzify_centroid(universe: np.ndarray, aggregated: np.ndarray) -> Optional[float]:
    """
    Center of gravity: sum(y * mu(y)) / sum(mu(y))

    Returns:
        Crisp value, or None when the aggregated curve has no mass
    """
    denominator = float(np.sum(aggregated))
    if denominator <= ZERO_MASS:
        return None
    return float(np.dot(universe, aggregated)) / denominator


@dataclass(frozen=True)
class InferenceResult:
    """
    Outcome of one inference call

    value is the centroid when a rule fired, otherwise whatever the
    no-match policy resolves to (NaN, a fallback number, or None).
    """
    value: Optional[float]
    matched: bool
    activations: Tuple[float, ...]
    policy: NoMatchMode
    degrees: Optional[Tuple[Tuple[float, ...], ...]] = None
    aggregated: Optional[np.ndarray] = field(default=None, compare=False, repr=False)

    @property
    def policy_applied(self) -> bool:
        return not self.matched

    @property
    def is_defined(self) -> bool:
        """True when value is a usable number"""
        return self.value is not None and not math.isnan(self.value)

    def as_float(self) -> float:
        """value, with None mapped to NaN"""
        return math.nan if self.value is None else self.value

    def unwrap(self) -> float:
        """
        Crisp value, raising if there is none

        Raises:
            UndefinedResult: no rule fired and the policy gave no number
        """
        if not self.is_defined:
            raise UndefinedResult(f"No rule fired (policy: {self.policy.value})")
        return self.value

    def fired_rules(self) -> Tuple[int, ...]:
        """0-based indices of rules with a positive activation"""
        return tuple(i for i, a in enumerate(self.activations) if a > 0.0)


class InferenceEngine:
    """
    Mamdani inference engine bound to one configuration

    Construct once at startup and pass it to call sites; the configuration
    must not be changed once calls have been issued against it.
    """

    def __init__(self, configuration: FuzzyConfiguration):
        self.configuration = configuration
        self._variables = configuration.variables
        self._output = configuration.output
        self._rule_base = configuration.rule_base

    @property
    def variable_names(self) -> Tuple[str, ...]:
        return self.configuration.variable_names

    @property
    def output_name(self) -> str:
        return self._output.name

    def input_vector(self, inputs: Mapping[str, float]) -> Tuple[float, ...]:
        """
        Order a name -> reading mapping into the configured variable order

        Raises:
            MissingVariable: a configured variable is absent
            InvalidVariableValue: a reading is not a number, or is NaN or infinite
        """
        values = []
        for name in self.variable_names:
            if name not in inputs or inputs[name] is None:
                raise MissingVariable(name)
            raw = inputs[name]
            if isinstance(raw, bool):
                raise InvalidVariableValue(name, raw, f"Non-numeric value for '{name}': {raw!r}")
            try:
                x = float(raw)
            except (TypeError, ValueError, OverflowError):
                raise InvalidVariableValue(name, raw, f"Non-numeric value for '{name}': {raw!r}") from None
            if not math.isfinite(x):
                raise InvalidVariableValue(name, x)
            values.append(x)
        return tuple(values)

    def fuzzify(self, values: Sequence[float]) -> Tuple[Tuple[float, ...], ...]:
        """Degrees of every term of every variable"""
        if len(values) != len(self._variables):
            raise ValueError(f"Expected {len(self._variables)} input values, got {len(values)}")
        return tuple(var.fuzzify(float(x)) for var, x in zip(self._variables, values))

    def infer_vector(self, values: Sequence[float], diagnostics: bool = False) -> InferenceResult:
        """
        Run inference on readings already in configured variable order

        Args:
            values: One reading per configured variable
            diagnostics: Also return term degrees and the aggregated curve

        Returns:
            InferenceResult; never raises when no rule fires
        """
        degrees = self.fuzzify(values)
        activations = self._rule_base.evaluate(degrees)
        aggregated = aggregate(activations, self._output)
        crisp = defuzzify_centroid(self._output.universe, aggregated)

        policy = self.configuration.no_match
        matched = crisp is not None
        if not matched:
            crisp = policy.resolve()
            logger.debug(f"No rule fired for {tuple(values)}; no-match policy '{policy.mode.value}' -> {crisp}")

        if diagnostics:
            aggregated.setflags(write=False)
        return InferenceResult(
            value=crisp,
            matched=matched,
            activations=tuple(a.alpha for a in activations),
            policy=policy.mode,
            degrees=degrees if diagnostics else None,
            aggregated=aggregated if diagnostics else None,
        )

    def infer(self, inputs: Mapping[str, float], diagnostics: bool = False) -> InferenceResult:
        """
        Run inference on a name -> reading mapping

        Extra keys in inputs are ignored.
        """
        return self.infer_vector(self.input_vector(inputs), diagnostics=diagnostics)

    def evaluate(self, inputs: Mapping[str, float]) -> float:
        """Crisp value, or the policy value (NaN when the policy gives none)"""
        return self.infer(inputs).as_float()

    def explain(self, inputs: Mapping[str, float], threshold: float = 0.0) -> List[Dict[str, Any]]:
        """
        Describe the rules that fire for an input

        Args:
            inputs: Name -> reading mapping
            threshold: Only rules with alpha above this are reported

        Returns:
            List of dicts with rule index, label, antecedent terms and degrees,
            output term and alpha, in rule order
        """
        values = self.input_vector(inputs)
        degrees = self.fuzzify(values)
        explanation = []

        for act in self._rule_base.evaluate(degrees):
            if act.alpha <= threshold:
                continue
            rule = self._rule_base[act.index]
            antecedent = [
                {
                    "var": var.name,
                    "term": var.terms[s - 1].name,
                    "mu": degrees[i][s - 1],
                }
                for i, (var, s) in enumerate(zip(self._variables, rule.selectors))
                if s != DONT_CARE
            ]
            explanation.append({
                "rule_index": act.index,
                "label": rule.label,
                "text": rule.describe(self._variables, self._output),
                "antecedent": antecedent,
                "consequent": {"var": self._output.name, "term": self._output.terms[rule.output - 1].name},
                "alpha": act.alpha,
            })

        return explanation
