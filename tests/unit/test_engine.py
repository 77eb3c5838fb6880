"""
Unit tests for the inference engine

Tests aggregation, centroid defuzzification, no-match policies and the
pinned end-to-end values of the built-in calibrations
"""
import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "../.."))

import math
from concurrent.futures import ThreadPoolExecutor

import pytest
import numpy as np

from src.fuzzy import (
    InferenceEngine,
    InferenceResult,
    NoMatchMode,
    NoMatchPolicy,
    RuleActivation,
    build_configuration,
    get_calibration,
    aggregate,
    defuzzify_centroid
)
from src.fuzzy.errors import FuzzyError, InvalidVariableValue, MissingVariable, UndefinedResult


OBSERVATION = {
    "temperature_2m": 26.5,
    "dew_point_2m": 20.1,
    "relative_humidity_2m": 75.2,
    "wind_speed_10m": 8.3,
    "vapour_pressure_deficit": 0.65,
    "evapotranspiration": 0.21,
}

ALL_ZERO = {name: 0.0 for name in OBSERVATION}


def tiny_document(no_match=None):
    """Two variables, output 0-10; rules only look at x"""
    doc = {
        "name": "tiny",
        "variables": [
            {"name": "x", "terms": [
                {"name": "low", "mf": "trapezoid", "params": [0, 0, 2, 4]},
                {"name": "high", "mf": "trapezoid", "params": [6, 8, 10, 10]},
            ]},
            {"name": "z", "terms": [
                {"name": "low", "mf": "triangle", "params": [0, 2, 4]},
                {"name": "high", "mf": "triangle", "params": [6, 8, 10]},
            ]},
        ],
        "output": {"name": "y", "min": 0, "max": 10, "resolution": 101, "terms": [
            {"name": "cool", "mf": "triangle", "params": [0, 2.5, 5]},
            {"name": "hot", "mf": "triangle", "params": [5, 7.5, 10]},
        ]},
        "rules": [[1, 0, 1], [2, 0, 2]],
    }
    if no_match is not None:
        doc["no_match"] = no_match
    return doc


@pytest.fixture(scope="module")
def malang():
    return InferenceEngine(get_calibration("malang"))


@pytest.fixture(scope="module")
def runtime():
    return InferenceEngine(get_calibration("runtime"))


class TestAggregation:
    """Test aggregate() and defuzzify_centroid()"""

    def test_clip_and_max(self):
        """Test min-clipping per rule and pointwise max across rules"""
        config = build_configuration(tiny_document())
        output = config.output
        acts = [RuleActivation(0, 0.5, 1), RuleActivation(1, 0.25, 2)]

        agg = aggregate(acts, output)

        assert agg.shape == (101,)
        assert agg.max() == pytest.approx(0.5)
        assert agg[25] == pytest.approx(0.5), "Cool peak clipped at 0.5"
        assert agg[75] == pytest.approx(0.25), "Hot peak clipped at 0.25"

    def test_zero_alpha_contributes_nothing(self):
        """Test rules with alpha 0 are skipped"""
        output = build_configuration(tiny_document()).output
        agg = aggregate([RuleActivation(0, 0.0, 1)], output)
        assert not agg.any()

    def test_centroid_symmetric_shape(self):
        """Test centroid of a symmetric curve is its center"""
        universe = np.linspace(0.0, 10.0, 101)
        curve = np.maximum(0.0, 1.0 - np.abs(universe - 4.0))
        assert defuzzify_centroid(universe, curve) == pytest.approx(4.0)

    def test_centroid_no_mass(self):
        """Test an empty curve has no centroid"""
        universe = np.linspace(0.0, 10.0, 101)
        assert defuzzify_centroid(universe, np.zeros(101)) is None


class TestMalangCalibration:
    """Test the pinned observation on the Malang calibration"""

    def test_observation_value(self, malang):
        """Test the crisp value of the reference observation"""
        result = malang.infer(OBSERVATION)
        assert result.matched
        assert result.value == pytest.approx(27.5, abs=0.05)

    def test_only_warm_rule_fires(self, malang):
        """Test high temp, medium RH, medium wind, medium VPD -> warm is the only rule"""
        result = malang.infer(OBSERVATION)
        assert result.fired_rules() == (3,)
        assert result.activations[3] == pytest.approx(0.65)

    def test_explain(self, malang):
        """Test the explanation of the reference observation"""
        explanation = malang.explain(OBSERVATION)

        assert len(explanation) == 1
        item = explanation[0]
        assert item["rule_index"] == 3
        assert item["alpha"] == pytest.approx(0.65)
        assert item["consequent"] == {"var": "apparent_temperature", "term": "warm"}
        assert [a["var"] for a in item["antecedent"]] == [
            "temperature_2m", "relative_humidity_2m", "wind_speed_10m", "vapour_pressure_deficit"
        ]
        assert [a["term"] for a in item["antecedent"]] == ["high", "medium", "medium", "medium"]
        assert item["text"].startswith("IF temperature_2m is high AND relative_humidity_2m is medium")

    def test_explain_threshold(self, malang):
        """Test rules at or below the threshold are omitted"""
        assert malang.explain(OBSERVATION, threshold=0.7) == []

    def test_no_match_fallback(self, malang):
        """Test the Malang calibration falls back to 27 °C"""
        result = malang.infer(ALL_ZERO)
        assert not result.matched
        assert result.policy_applied
        assert result.policy == NoMatchMode.FALLBACK
        assert result.value == 27.0
        assert result.fired_rules() == ()

    def test_output_within_universe(self, malang):
        """Test every matched value lies in [22, 32]"""
        rng = np.random.RandomState(7)
        low = np.array([20.0, 17.0, 60.0, 3.0, 0.2, 0.15])
        high = np.array([28.0, 23.0, 90.0, 18.0, 1.3, 0.26])

        for row in rng.uniform(low, high, size=(200, 6)):
            result = malang.infer_vector(row)
            if result.matched:
                assert 22.0 <= result.value <= 32.0


class TestRuntimeCalibration:
    """Test the runtime calibration"""

    def test_observation_value(self, runtime):
        """Test the crisp value of the reference observation"""
        result = runtime.infer(OBSERVATION)
        assert result.matched
        assert result.fired_rules() == (2, 5, 7)
        assert result.value == pytest.approx(24.7215, abs=0.01)

    def test_no_match_sentinel(self, runtime):
        """Test NaN is reported when no rule fires"""
        result = runtime.infer(ALL_ZERO)
        assert not result.matched
        assert math.isnan(result.value)
        assert not result.is_defined
        assert math.isnan(runtime.evaluate(ALL_ZERO))


class TestNoMatchPolicies:
    """Test the no-match policy switch"""

    def test_undefined_policy(self):
        """Test an explicit undefined result"""
        engine = InferenceEngine(build_configuration(tiny_document({"policy": "undefined"})))
        result = engine.infer({"x": 5.0, "z": 5.0})

        assert result.value is None
        assert math.isnan(result.as_float())
        with pytest.raises(UndefinedResult):
            result.unwrap()

    def test_error_alias(self):
        """Test "error" behaves as undefined"""
        config = build_configuration(tiny_document({"policy": "error"}))
        assert config.no_match.mode == NoMatchMode.UNDEFINED

    def test_override_policy(self):
        """Test with_no_match() swaps only the policy"""
        config = get_calibration("malang").with_no_match(NoMatchPolicy.sentinel())
        engine = InferenceEngine(config)

        assert math.isnan(engine.infer(ALL_ZERO).value)
        assert engine.infer(OBSERVATION).value == pytest.approx(27.5, abs=0.05)

    def test_unwrap_matched(self):
        """Test unwrap() returns the crisp value"""
        engine = InferenceEngine(build_configuration(tiny_document()))
        assert engine.infer({"x": 1.0, "z": 0.0}).unwrap() == pytest.approx(2.5)

    def test_fallback_requires_value(self):
        """Test a fallback policy without a number is rejected"""
        with pytest.raises(ValueError):
            NoMatchPolicy(NoMatchMode.FALLBACK)


class TestInferenceEngine:
    """Test engine input handling and guarantees"""

    def test_dont_care_variable_has_no_effect(self):
        """Test z never influences rules that ignore it"""
        engine = InferenceEngine(build_configuration(tiny_document()))
        values = {engine.infer({"x": 1.0, "z": z}).value for z in (0.0, 2.0, 5.0, 9.0, -40.0)}
        assert len(values) == 1

    def test_missing_variable(self, malang):
        """Test absent or None readings raise"""
        incomplete = dict(OBSERVATION)
        del incomplete["wind_speed_10m"]
        with pytest.raises(MissingVariable) as exc:
            malang.infer(incomplete)
        assert exc.value.variable == "wind_speed_10m"

        with pytest.raises(MissingVariable):
            malang.infer(dict(OBSERVATION, evapotranspiration=None))

    def test_non_finite_reading(self, malang):
        """Test NaN readings raise"""
        with pytest.raises(InvalidVariableValue):
            malang.infer(dict(OBSERVATION, temperature_2m=float("nan")))

    @pytest.mark.parametrize("raw", [True, "abc", 10 ** 400, [26.5]])
    def test_non_numeric_reading(self, malang, raw):
        """Test booleans, text and out-of-range numbers raise the engine's own error"""
        with pytest.raises(InvalidVariableValue) as exc:
            malang.infer(dict(OBSERVATION, temperature_2m=raw))

        assert isinstance(exc.value, FuzzyError)
        assert exc.value.variable == "temperature_2m"
        assert "Non-numeric" in str(exc.value)

    def test_numeric_text_reading(self, malang):
        """Test a numeric string reads like the number"""
        assert malang.evaluate(dict(OBSERVATION, temperature_2m="26.5")) == malang.evaluate(OBSERVATION)

    def test_extra_keys_ignored(self, malang):
        """Test unrelated keys in the mapping"""
        a = malang.infer(OBSERVATION).value
        b = malang.infer(dict(OBSERVATION, soil_moisture=0.3)).value
        assert a == b

    def test_vector_length_checked(self, malang):
        """Test infer_vector() needs one value per variable"""
        with pytest.raises(ValueError, match="Expected 6"):
            malang.infer_vector([26.5, 20.1])

    def test_vector_and_mapping_agree(self, malang):
        """Test both entry points give the same result"""
        vector = [OBSERVATION[name] for name in malang.variable_names]
        assert malang.infer_vector(vector) == malang.infer(OBSERVATION)

    def test_diagnostics(self, malang):
        """Test degrees and aggregated curve are exposed on request"""
        plain = malang.infer(OBSERVATION)
        assert plain.degrees is None
        assert plain.aggregated is None

        result = malang.infer(OBSERVATION, diagnostics=True)
        assert len(result.degrees) == 6
        assert result.degrees[0] == (0.0, 0.0, 1.0)
        assert result.degrees[2][1] == pytest.approx(0.65)
        assert result.aggregated.shape == (1000,)
        assert result.aggregated.max() == pytest.approx(0.65)
        assert not result.aggregated.flags.writeable

    def test_deterministic(self, malang):
        """Test repeated calls give identical values"""
        first = malang.infer(OBSERVATION).value
        assert all(malang.infer(OBSERVATION).value == first for _ in range(20))

    def test_same_configuration_same_value(self):
        """Test two engines built from the same calibration agree exactly"""
        a = InferenceEngine(get_calibration("malang")).evaluate(OBSERVATION)
        b = InferenceEngine(get_calibration("malang")).evaluate(OBSERVATION)
        assert a == b

    def test_thread_safe(self, malang):
        """Test concurrent calls on one engine"""
        expected = malang.evaluate(OBSERVATION)
        with ThreadPoolExecutor(max_workers=8) as ex:
            values = list(ex.map(lambda _: malang.evaluate(OBSERVATION), range(64)))
        assert values == [expected] * 64

    def test_result_type(self, malang):
        """Test infer() returns an InferenceResult"""
        result = malang.infer(OBSERVATION)
        assert isinstance(result, InferenceResult)
        assert malang.output_name == "apparent_temperature"
