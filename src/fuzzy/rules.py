"""
Rule Base

Each rule carries one selector per input variable (0 = don't care,
k = 1-based term index) and the 1-based index of its output term.
Conjunction is the minimum over the non-zero selectors only, so a rule
may constrain any subset of the inputs.
"""
from dataclasses import dataclass
from typing import Iterator, List, Optional, Sequence, Tuple

from .errors import ConfigurationError
from .variables import OutputDomain, VariableDomain

DONT_CARE = 0


@dataclass(frozen=True)
class Rule:
    """
    IF var_1 is term[s_1] AND ... THEN output is term[output]

    Args:
        selectors: One entry per input variable, 0 for "don't care"
        output: 1-based output term index
        label: Optional human readable name
    """
    selectors: Tuple[int, ...]
    output: int
    label: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "selectors", tuple(self.selectors))

    @property
    def active_positions(self) -> Tuple[int, ...]:
        """0-based positions of the variables this rule constrains"""
        return tuple(i for i, s in enumerate(self.selectors) if s != DONT_CARE)

    def strength(self, degrees: Sequence[Sequence[float]]) -> float:
        """
        Conjunction degree alpha of this rule

        Args:
            degrees: Fuzzified inputs, degrees[i][k] is the degree of term k+1 of variable i

        Returns:
            min over the non-zero selectors of the selected term degree
        """
        alpha = 1.0
        for i, s in enumerate(self.selectors):
            if s == DONT_CARE:
                continue
            d = degrees[i][s - 1]
            if d < alpha:
                alpha = d
        return alpha

    def describe(self, variables: Sequence[VariableDomain], output: OutputDomain) -> str:
        parts = [
            f"{var.name} is {var.terms[s - 1].name}"
            for var, s in zip(variables, self.selectors)
            if s != DONT_CARE
        ]
        return f"IF {' AND '.join(parts)} THEN {output.name} is {output.terms[self.output - 1].name}"


@dataclass(frozen=True)
class RuleActivation:
    """Strength of one rule for one input"""
    index: int
    alpha: float
    output: int

    @property
    def fired(self) -> bool:
        return self.alpha > 0.0


class RuleBase:
    """
    Ordered, validated collection of rules

    Validation happens once here; evaluation assumes a consistent rule base.
    """

    def __init__(self, rules: Sequence[Rule], variables: Sequence[VariableDomain], output: OutputDomain):
        self._rules: Tuple[Rule, ...] = tuple(rules)
        self._sizes = tuple(len(v) for v in variables)
        self._n_outputs = len(output.terms)

        if not self._rules:
            raise ConfigurationError("Rule base must contain at least one rule")

        for n, rule in enumerate(self._rules, start=1):
            self._validate(n, rule, variables)

    def _validate(self, n: int, rule: Rule, variables: Sequence[VariableDomain]) -> None:
        if len(rule.selectors) != len(self._sizes):
            raise ConfigurationError(
                f"Rule {n} has {len(rule.selectors)} selectors, expected {len(self._sizes)}"
            )

        for var, size, s in zip(variables, self._sizes, rule.selectors):
            if isinstance(s, bool) or not isinstance(s, int):
                raise ConfigurationError(f"Rule {n}: selector for '{var.name}' must be an integer, got {s!r}")
            if s < 0 or s > size:
                raise ConfigurationError(
                    f"Rule {n}: selector {s} out of range for '{var.name}' (0..{size})"
                )

        if all(s == DONT_CARE for s in rule.selectors):
            raise ConfigurationError(f"Rule {n} has only don't-care selectors")

        if isinstance(rule.output, bool) or not isinstance(rule.output, int):
            raise ConfigurationError(f"Rule {n}: output term must be an integer index, got {rule.output!r}")
        if rule.output < 1 or rule.output > self._n_outputs:
            raise ConfigurationError(
                f"Rule {n}: output term {rule.output} out of range (1..{self._n_outputs})"
            )

    def __len__(self) -> int:
        return len(self._rules)

    def __iter__(self) -> Iterator[Rule]:
        return iter(self._rules)

    def __getitem__(self, index: int) -> Rule:
        return self._rules[index]

    @property
    def rules(self) -> Tuple[Rule, ...]:
        return self._rules

    def evaluate(self, degrees: Sequence[Sequence[float]]) -> List[RuleActivation]:
        """Conjunction strength of every rule, in rule order"""
        return [
            RuleActivation(index=i, alpha=rule.strength(degrees), output=rule.output)
            for i, rule in enumerate(self._rules)
        ]
