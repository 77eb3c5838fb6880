"""
Example: Apparent Temperature from Weather Readings

This example shows single-point inference with explanations, the no-match
policies, and a small batch with a partially broken record.
"""
from src.fuzzy import InferenceEngine, NoMatchPolicy, get_calibration
from src.batch import BatchProcessor


READING = {
    "temperature_2m": 26.5,
    "dew_point_2m": 20.1,
    "relative_humidity_2m": 75.2,
    "wind_speed_10m": 8.3,
    "vapour_pressure_deficit": 0.65,
    "evapotranspiration": 0.21,
}


def example_single_point():
    """Example: Infer one apparent temperature and explain it"""

    engine = InferenceEngine(get_calibration("malang"))

    result = engine.infer(READING)
    print(f"Apparent temperature: {result.value:.2f} °C")
    print(f"  Rules fired: {result.fired_rules()}")

    for item in engine.explain(READING):
        print(f"  [{item['rule_index']}] {item['text']} (alpha={item['alpha']:.2f})")


def example_no_match_policies():
    """Example: What happens when no rule fires"""

    calm = {name: 0.0 for name in READING}
    configuration = get_calibration("malang")

    for policy in (NoMatchPolicy.fallback(27.0), NoMatchPolicy.sentinel(), NoMatchPolicy.undefined()):
        engine = InferenceEngine(configuration.with_no_match(policy))
        result = engine.infer(calm)
        print(f"\n{policy.mode.value}: value={result.value} matched={result.matched}")


def example_batch():
    """Example: Batch over labeled sites, one record missing a field"""

    engine = InferenceEngine(get_calibration("runtime"))
    broken = dict(READING)
    del broken["wind_speed_10m"]

    records = [
        ((112.61, -7.96), READING),
        ((112.63, -7.98), broken),
        ((112.55, -7.90), dict(READING, temperature_2m=30.2)),
    ]

    processor = BatchProcessor(
        engine,
        progress_callback=lambda done, total: print(f"  progress {done}/{total}"),
        progress_interval=1
    )
    result = processor.run(records)

    print(f"\nEvaluated {result.processed_count}, skipped {result.skipped_count}")
    for record in result.results:
        print(f"  {record.identifier}: {record.value:.2f}")
    for skipped in result.skipped:
        print(f"  skipped {skipped.identifier}: {skipped.reason}")


if __name__ == "__main__":
    example_single_point()
    example_no_match_policies()
    example_batch()
