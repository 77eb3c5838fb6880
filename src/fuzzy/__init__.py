# Fuzzy Inference Module
from .errors import (
    FuzzyError,
    ConfigurationError,
    InvalidVariableValue,
    MissingVariable,
    UndefinedResult
)
from .membership import (
    MembershipFunction,
    Trapezoid,
    Triangle,
    membership_from_spec
)
from .variables import (
    Term,
    VariableDomain,
    OutputDomain
)
from .rules import (
    Rule,
    RuleBase,
    RuleActivation,
    DONT_CARE
)
from .config import (
    NoMatchMode,
    NoMatchPolicy,
    FuzzyConfiguration,
    ConfigurationDocument,
    build_configuration,
    load_configuration
)
from .engine import (
    InferenceEngine,
    InferenceResult,
    aggregate,
    defuzzify_centroid
)
from .calibrations import (
    get_calibration,
    list_calibrations,
    calibration_document,
    VARIABLE_ORDER
)

__all__ = [
    'FuzzyError',
    'ConfigurationError',
    'InvalidVariableValue',
    'MissingVariable',
    'UndefinedResult',
    'MembershipFunction',
    'Trapezoid',
    'Triangle',
    'membership_from_spec',
    'Term',
    'VariableDomain',
    'OutputDomain',
    'Rule',
    'RuleBase',
    'RuleActivation',
    'DONT_CARE',
    'NoMatchMode',
    'NoMatchPolicy',
    'FuzzyConfiguration',
    'ConfigurationDocument',
    'build_configuration',
    'load_configuration',
    'InferenceEngine',
    'InferenceResult',
    'aggregate',
    'defuzzify_centroid',
    'get_calibration',
    'list_calibrations',
    'calibration_document',
    'VARIABLE_ORDER'
]
