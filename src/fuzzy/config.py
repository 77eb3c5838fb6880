"""
Engine Configuration

Declarative configuration documents (validated with pydantic) and the
immutable FuzzyConfiguration built from them. A configuration is built once
at startup and shared read-only by every inference call; swapping documents
swaps calibrations without touching engine code.

Document layout (JSON):

    {
      "name": "malang",
      "variables": [
        {"name": "temperature_2m", "terms": [
          {"name": "low", "mf": "trapezoid", "params": [20, 20, 22, 23.5]}, ...]},
        ...
      ],
      "output": {"name": "apparent_temperature", "min": 22, "max": 32,
                 "resolution": 1000, "terms": [...]},
      "rules": [
        {"selectors": [3, 0, 1, 1, 0, 0], "output": "very_hot"},
        [3, 3, 2, 0, 3, 3, 4]
      ],
      "no_match": {"policy": "fallback", "value": 27.0}
    }
"""
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union
import json
import logging
import math
import os

from pydantic import BaseModel, ValidationError, field_validator

from .errors import ConfigurationError
from .membership import membership_from_spec
from .rules import Rule, RuleBase
from .variables import OutputDomain, Term, VariableDomain

logger = logging.getLogger(__name__)


class NoMatchMode(str, Enum):
    """What a call returns when no rule fires"""
    SENTINEL = "sentinel"    # NaN
    FALLBACK = "fallback"    # caller-supplied value
    UNDEFINED = "undefined"  # explicit "no value" (None)


@dataclass(frozen=True)
class NoMatchPolicy:
    """Resolution of the "no rule fired" state"""
    mode: NoMatchMode = NoMatchMode.SENTINEL
    value: Optional[float] = None

    def __post_init__(self):
        mode = NoMatchMode(self.mode)
        object.__setattr__(self, "mode", mode)
        if mode is NoMatchMode.FALLBACK:
            if self.value is None or not math.isfinite(self.value):
                raise ConfigurationError("Fallback no-match policy needs a finite value")
        elif self.value is not None:
            raise ConfigurationError(f"No-match policy '{mode.value}' does not take a value")

    @classmethod
    def sentinel(cls) -> 'NoMatchPolicy':
        return cls(NoMatchMode.SENTINEL)

    @classmethod
    def fallback(cls, value: float) -> 'NoMatchPolicy':
        return cls(NoMatchMode.FALLBACK, float(value))

    @classmethod
    def undefined(cls) -> 'NoMatchPolicy':
        return cls(NoMatchMode.UNDEFINED)

    def resolve(self) -> Optional[float]:
        """Value reported for an input that fires no rule"""
        if self.mode is NoMatchMode.FALLBACK:
            return self.value
        if self.mode is NoMatchMode.SENTINEL:
            return math.nan
        return None

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {"policy": self.mode.value}
        if self.mode is NoMatchMode.FALLBACK:
            d["value"] = self.value
        return d


# ---------------------------------------------------------------------------
# Documents
# ---------------------------------------------------------------------------

class TermDocument(BaseModel):
    name: str
    mf: str
    params: List[float]


class VariableDocument(BaseModel):
    name: str
    terms: List[TermDocument]


class OutputDocument(BaseModel):
    name: str = "apparent_temperature"
    min: float
    max: float
    resolution: int = 1000
    terms: List[TermDocument]


class RuleDocument(BaseModel):
    selectors: List[int]
    output: Union[int, str]
    label: Optional[str] = None


class NoMatchDocument(BaseModel):
    policy: str = "sentinel"
    value: Optional[float] = None

    @field_validator("policy")
    @classmethod
    def _known_policy(cls, v: str) -> str:
        v = v.strip().lower()
        if v == "error":
            v = NoMatchMode.UNDEFINED.value
        if v not in {m.value for m in NoMatchMode}:
            raise ValueError(f"unknown no-match policy '{v}'")
        return v


class ConfigurationDocument(BaseModel):
    name: str = "custom"
    description: Optional[str] = None
    variables: List[VariableDocument]
    output: OutputDocument
    rules: List[RuleDocument]
    no_match: NoMatchDocument = NoMatchDocument()

    @field_validator("rules", mode="before")
    @classmethod
    def _expand_compact_rules(cls, v: Any) -> Any:
        # [s_1, ..., s_n, out] -> {"selectors": [...], "output": out}
        if not isinstance(v, list):
            return v
        expanded = []
        for item in v:
            if isinstance(item, (list, tuple)):
                if len(item) < 2:
                    raise ValueError(f"compact rule needs selectors and an output term, got {item!r}")
                expanded.append({"selectors": list(item[:-1]), "output": item[-1]})
            else:
                expanded.append(item)
        return expanded


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class FuzzyConfiguration:
    """
    Validated, immutable engine configuration

    Args:
        variables: Input variables in input-vector order
        rule_base: Validated rules
        output: Discretized output domain
        no_match: Policy applied when no rule fires
        name: Calibration name
    """
    variables: Tuple[VariableDomain, ...]
    rule_base: RuleBase
    output: OutputDomain
    no_match: NoMatchPolicy = NoMatchPolicy()
    name: str = "custom"

    def __post_init__(self):
        object.__setattr__(self, "variables", tuple(self.variables))

    @property
    def variable_names(self) -> Tuple[str, ...]:
        return tuple(v.name for v in self.variables)

    def with_no_match(self, policy: NoMatchPolicy) -> 'FuzzyConfiguration':
        """Same calibration, different no-match policy"""
        return replace(self, no_match=policy)

    def to_dict(self) -> Dict[str, Any]:
        """Convert back to a configuration document"""
        def term_dict(term: Term) -> Dict[str, Any]:
            return {"name": term.name, "mf": term.mf.kind, "params": list(term.mf.params())}

        rules = []
        for rule in self.rule_base:
            d: Dict[str, Any] = {"selectors": list(rule.selectors), "output": rule.output}
            if rule.label:
                d["label"] = rule.label
            rules.append(d)

        return {
            "name": self.name,
            "variables": [
                {"name": v.name, "terms": [term_dict(t) for t in v.terms]}
                for v in self.variables
            ],
            "output": {
                "name": self.output.name,
                "min": self.output.minimum,
                "max": self.output.maximum,
                "resolution": self.output.resolution,
                "terms": [term_dict(t) for t in self.output.terms],
            },
            "rules": rules,
            "no_match": self.no_match.to_dict(),
        }


def _build_terms(owner: str, docs: List[TermDocument]) -> List[Term]:
    terms = []
    for doc in docs:
        try:
            mf = membership_from_spec(doc.mf, doc.params)
        except ConfigurationError as e:
            raise ConfigurationError(f"'{owner}' term '{doc.name}': {e}") from e
        terms.append(Term(doc.name, mf))
    return terms


def _resolve_output(n: int, ref: Union[int, str], output: OutputDomain) -> int:
    if isinstance(ref, str):
        if ref.strip().isdigit():
            return int(ref)
        try:
            return output.term_index(ref)
        except KeyError:
            raise ConfigurationError(f"Rule {n}: unknown output term '{ref}'") from None
    return ref


def build_configuration(
    document: Union[Mapping[str, Any], ConfigurationDocument],
    no_match: Optional[NoMatchPolicy] = None
) -> FuzzyConfiguration:
    """
    Validate a configuration document and build the engine configuration

    Args:
        document: Mapping or ConfigurationDocument
        no_match: Overrides the document's no-match policy

    Returns:
        FuzzyConfiguration ready to be shared by InferenceEngine instances

    Raises:
        ConfigurationError: malformed document, unordered MF parameters,
            out-of-range selectors, all-don't-care rules, ...
    """
    if isinstance(document, ConfigurationDocument):
        doc = document
    else:
        try:
            doc = ConfigurationDocument.model_validate(dict(document))
        except ValidationError as e:
            raise ConfigurationError(f"Invalid configuration document: {e}") from e
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Configuration document must be a mapping: {e}") from e

    if not doc.variables:
        raise ConfigurationError("Configuration must define at least one input variable")

    names = [v.name for v in doc.variables]
    duplicates = sorted({n for n in names if names.count(n) > 1})
    if duplicates:
        raise ConfigurationError(f"Duplicate variable names: {duplicates}")

    variables = tuple(VariableDomain(v.name, tuple(_build_terms(v.name, v.terms))) for v in doc.variables)

    out = doc.output
    output = OutputDomain(
        name=out.name,
        minimum=out.min,
        maximum=out.max,
        resolution=out.resolution,
        terms=tuple(_build_terms(out.name, out.terms)),
    )

    rules = [
        Rule(
            selectors=tuple(r.selectors),
            output=_resolve_output(n, r.output, output),
            label=r.label,
        )
        for n, r in enumerate(doc.rules, start=1)
    ]
    rule_base = RuleBase(rules, variables, output)

    if no_match is None:
        no_match = NoMatchPolicy(NoMatchMode(doc.no_match.policy), doc.no_match.value)

    config = FuzzyConfiguration(
        variables=variables,
        rule_base=rule_base,
        output=output,
        no_match=no_match,
        name=doc.name,
    )
    logger.info(
        f"Built configuration '{config.name}': {len(variables)} variables, "
        f"{len(rule_base)} rules, output [{output.minimum}, {output.maximum}] "
        f"at resolution {output.resolution}, no-match={no_match.mode.value}"
    )
    return config


def load_configuration(path: str, no_match: Optional[NoMatchPolicy] = None) -> FuzzyConfiguration:
    """
    Load a configuration document from a JSON file

    Raises:
        ConfigurationError: file missing, not JSON, or invalid document
    """
    if not os.path.exists(path):
        raise ConfigurationError(f"Configuration file not found: {path}")

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Configuration file {path} is not valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"Configuration file {path} must contain a JSON object")

    logger.info(f"Loading configuration from {path}")
    return build_configuration(data, no_match=no_match)
