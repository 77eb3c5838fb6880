"""
Built-in Calibrations

Calibration sets for the apparent temperature engine, kept as configuration
documents so that each set is data rather than a separate engine.

- malang: calibrated on the Malang observation range (temperature 21-27 °C,
  humidity 67-87 %), 15 rules, output 22-32 °C sampled 1000 times. Falls back
  to 27 °C (middle of the output range) when no rule fires.
- runtime: wider generic ranges, 12 rules, output 15-45 °C sampled once per
  degree. Reports NaN when no rule fires.

Rule rows are [temperature, dew point, humidity, wind, VPD, ET, output], with
0 meaning "don't care" and k the 1-based term index.
"""
from typing import Any, Dict, List, Tuple
import copy

from .config import FuzzyConfiguration, build_configuration
from .errors import ConfigurationError

VARIABLE_ORDER = (
    "temperature_2m",
    "dew_point_2m",
    "relative_humidity_2m",
    "wind_speed_10m",
    "vapour_pressure_deficit",
    "evapotranspiration",
)

OUTPUT_TERMS = ("cool", "comfortable", "warm", "hot", "very_hot")


def _trap(name: str, a: float, b: float, c: float, d: float) -> Dict[str, Any]:
    return {"name": name, "mf": "trapezoid", "params": [a, b, c, d]}


def _tri(name: str, a: float, b: float, c: float) -> Dict[str, Any]:
    return {"name": name, "mf": "triangle", "params": [a, b, c]}


def _rules(rows: List[Tuple[List[int], str]]) -> List[Dict[str, Any]]:
    return [{"selectors": row[:-1], "output": row[-1], "label": label} for row, label in rows]


MALANG: Dict[str, Any] = {
    "name": "malang",
    "description": "Calibrated for the Malang climate (output 22-32 °C)",
    "variables": [
        {"name": "temperature_2m", "terms": [
            _trap("low", 20.0, 20.0, 22.0, 23.5),
            _tri("medium", 22.0, 24.0, 26.0),
            _trap("high", 25.0, 26.5, 28.0, 28.0),
        ]},
        {"name": "dew_point_2m", "terms": [
            _trap("low", 17.0, 17.0, 19.0, 20.0),
            _tri("medium", 19.0, 20.0, 21.0),
            _trap("high", 20.5, 21.5, 23.0, 23.0),
        ]},
        {"name": "relative_humidity_2m", "terms": [
            _trap("low", 60.0, 60.0, 70.0, 75.0),
            _tri("medium", 70.0, 78.0, 85.0),
            _trap("high", 82.0, 86.0, 90.0, 90.0),
        ]},
        {"name": "wind_speed_10m", "terms": [
            _trap("calm", 3.0, 3.0, 6.0, 8.0),
            _tri("medium", 6.0, 9.0, 12.0),
            _trap("strong", 10.0, 14.0, 18.0, 18.0),
        ]},
        {"name": "vapour_pressure_deficit", "terms": [
            _trap("low", 0.2, 0.2, 0.4, 0.6),
            _tri("medium", 0.5, 0.7, 0.9),
            _trap("high", 0.8, 1.0, 1.3, 1.3),
        ]},
        {"name": "evapotranspiration", "terms": [
            _trap("low", 0.15, 0.15, 0.18, 0.20),
            _tri("medium", 0.19, 0.21, 0.23),
            _trap("high", 0.22, 0.24, 0.26, 0.26),
        ]},
    ],
    "output": {
        "name": "apparent_temperature",
        "min": 22.0,
        "max": 32.0,
        "resolution": 1000,
        "terms": [
            _trap("cool", 22.0, 22.0, 24.0, 25.0),
            _tri("comfortable", 24.0, 25.5, 27.0),
            _tri("warm", 26.0, 27.5, 29.0),
            _tri("hot", 28.0, 29.5, 31.0),
            _trap("very_hot", 30.0, 31.0, 32.0, 32.0),
        ],
    },
    "rules": _rules([
        ([3, 0, 1, 1, 0, 0, 5], "high temp, low RH, calm wind"),
        ([3, 3, 2, 0, 3, 3, 4], "high temp, high dew, medium RH, high VPD, high ET"),
        ([3, 2, 3, 3, 0, 0, 4], "high temp, medium dew, high RH, strong wind"),
        ([3, 0, 2, 2, 2, 0, 3], "high temp, medium RH, medium wind, medium VPD"),
        ([2, 2, 2, 1, 1, 1, 2], "medium temp, medium dew, medium RH, calm wind, low VPD, low ET"),
        ([2, 1, 3, 3, 1, 2, 2], "medium temp, low dew, high RH, strong wind, low VPD"),
        ([2, 3, 1, 0, 3, 0, 3], "medium temp, high dew, low RH, high VPD"),
        ([1, 1, 3, 3, 1, 1, 1], "low temp, low dew, high RH, strong wind, low VPD, low ET"),
        ([1, 0, 2, 2, 0, 0, 1], "low temp, medium RH, medium wind"),
        ([1, 2, 1, 1, 2, 2, 2], "low temp, medium dew, low RH, calm wind, medium VPD, medium ET"),
        ([0, 3, 3, 1, 1, 0, 3], "humid: high dew, high RH, calm wind, low VPD"),
        ([0, 1, 1, 3, 3, 3, 1], "dry and windy: low dew, low RH, strong wind, high VPD, high ET"),
        ([2, 0, 1, 2, 2, 3, 4], "medium temp, low RH, medium wind, medium VPD, high ET"),
        ([1, 3, 2, 0, 1, 1, 2], "low temp, high dew, medium RH, low VPD, low ET"),
        ([3, 1, 3, 0, 1, 2, 3], "high temp, low dew, high RH, low VPD, medium ET"),
    ]),
    "no_match": {"policy": "fallback", "value": 27.0},
}


RUNTIME: Dict[str, Any] = {
    "name": "runtime",
    "description": "Generic tropical ranges (output 15-45 °C, 1 °C steps)",
    "variables": [
        {"name": "temperature_2m", "terms": [
            _trap("low", 15.0, 15.0, 18.0, 22.0),
            _tri("medium", 18.0, 25.0, 32.0),
            _trap("high", 28.0, 32.0, 35.0, 35.0),
        ]},
        {"name": "dew_point_2m", "terms": [
            _trap("low", 10.0, 10.0, 13.0, 17.0),
            _tri("medium", 13.0, 18.0, 23.0),
            _tri("high", 20.0, 23.0, 25.0),
        ]},
        {"name": "relative_humidity_2m", "terms": [
            _trap("low", 40.0, 40.0, 50.0, 60.0),
            _tri("medium", 50.0, 65.0, 80.0),
            _trap("high", 75.0, 85.0, 100.0, 100.0),
        ]},
        {"name": "wind_speed_10m", "terms": [
            _trap("calm", 0.0, 0.0, 3.0, 7.0),
            _tri("medium", 5.0, 10.0, 15.0),
            _trap("strong", 12.0, 16.0, 20.0, 20.0),
        ]},
        {"name": "vapour_pressure_deficit", "terms": [
            _trap("low", 0.0, 0.0, 0.5, 1.0),
            _tri("medium", 0.5, 1.5, 2.5),
            _trap("high", 2.0, 2.5, 3.0, 3.0),
        ]},
        {"name": "evapotranspiration", "terms": [
            _trap("low", 0.0, 0.0, 1.0, 2.0),
            _tri("medium", 1.5, 3.0, 4.5),
            _trap("high", 3.5, 5.0, 6.0, 6.0),
        ]},
    ],
    "output": {
        "name": "apparent_temperature",
        "min": 15.0,
        "max": 45.0,
        "resolution": 31,
        "terms": [
            _trap("cool", 15.0, 15.0, 18.0, 22.0),
            _tri("comfortable", 18.0, 24.0, 30.0),
            _tri("warm", 25.0, 30.0, 35.0),
            _tri("hot", 30.0, 35.0, 40.0),
            _trap("very_hot", 38.0, 42.0, 45.0, 45.0),
        ],
    },
    "rules": _rules([
        ([3, 0, 1, 1, 0, 0, 5], "high temp, low RH, calm wind"),
        ([3, 0, 1, 3, 0, 0, 4], "high temp, low RH, strong wind"),
        ([2, 3, 2, 0, 0, 0, 2], "medium temp, high dew, medium RH"),
        ([1, 0, 0, 3, 0, 0, 1], "low temp, strong wind"),
        ([3, 0, 0, 0, 3, 3, 4], "high temp, high VPD, high ET"),
        ([0, 3, 3, 0, 0, 0, 3], "high dew, high RH"),
        ([2, 0, 0, 3, 0, 0, 1], "medium temp, strong wind"),
        ([0, 0, 3, 0, 1, 1, 1], "high RH, low VPD, low ET"),
        ([3, 3, 0, 3, 0, 0, 3], "high temp, high dew, strong wind"),
        ([2, 1, 1, 0, 0, 0, 1], "medium temp, low dew, low RH"),
        ([1, 0, 3, 0, 0, 0, 1], "low temp, high RH"),
        ([3, 0, 0, 0, 0, 0, 4], "high temp"),
    ]),
    "no_match": {"policy": "sentinel"},
}


CALIBRATIONS: Dict[str, Dict[str, Any]] = {
    "malang": MALANG,
    "runtime": RUNTIME,
}

DEFAULT_CALIBRATION = "malang"


def list_calibrations() -> List[str]:
    return sorted(CALIBRATIONS)


def calibration_document(name: str) -> Dict[str, Any]:
    """Deep copy of a built-in calibration document"""
    try:
        return copy.deepcopy(CALIBRATIONS[name])
    except KeyError:
        raise ConfigurationError(
            f"Unknown calibration '{name}', available: {', '.join(list_calibrations())}"
        ) from None


def get_calibration(name: str = DEFAULT_CALIBRATION) -> FuzzyConfiguration:
    """Build the configuration of a built-in calibration"""
    return build_configuration(calibration_document(name))
