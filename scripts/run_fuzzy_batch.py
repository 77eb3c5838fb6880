#!/usr/bin/env python3
"""
Run apparent temperature inference over a measurement CSV

Usage:
    python scripts/run_fuzzy_batch.py measurements.csv

The CSV needs longitude, latitude and one column per input variable; an
optional "type" column (urban/rural) enables the UHI intensity summary.
"""
import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

import logging
from src.fuzzy import InferenceEngine, get_calibration, load_configuration
from src.batch import BatchProcessor
from src.weather_data import read_measurements_csv, records_from_frame, results_to_frame, site_kinds_from_frame
from src.analytics import compute_uhi_intensity

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def log_progress(processed: int, total: int) -> None:
    logger.info(f"Progress: {processed}/{total}")


def main():
    """Run the batch and report results"""
    input_path = sys.argv[1] if len(sys.argv) > 1 else os.getenv('FUZZY_INPUT')
    if not input_path:
        logger.error("No input CSV given (argument or FUZZY_INPUT)")
        return 2

    calibration = os.getenv('FUZZY_CALIBRATION', 'malang')
    config_path = os.getenv('FUZZY_CONFIG_PATH')
    progress_interval = int(os.getenv('FUZZY_PROGRESS_INTERVAL', '10'))
    chunk_size = int(os.getenv('FUZZY_CHUNK_SIZE', '10'))
    output_file = os.getenv('FUZZY_OUTPUT')

    logger.info("=" * 60)
    logger.info("Apparent Temperature Batch")
    logger.info("=" * 60)

    try:
        if config_path:
            configuration = load_configuration(config_path)
        else:
            configuration = get_calibration(calibration)
        engine = InferenceEngine(configuration)

        df = read_measurements_csv(input_path)
        records = records_from_frame(df, variables=engine.variable_names)

        processor = BatchProcessor(
            engine,
            progress_callback=log_progress,
            progress_interval=progress_interval,
            chunk_size=chunk_size
        )
        result = processor.run(records)

        logger.info("")
        logger.info(f"Evaluated: {result.processed_count}")
        logger.info(f"Skipped: {result.skipped_count}")
        for skipped in result.skipped:
            logger.info(f"  row {skipped.index}: {skipped.reason}")

        site_kinds = site_kinds_from_frame(df)
        if site_kinds:
            for method in ("max_min", "mean_difference"):
                uhi = compute_uhi_intensity(result, site_kinds, method=method)
                if uhi.is_defined:
                    logger.info(f"UHI intensity ({method}): {uhi.intensity:.1f} °C")

        if output_file:
            results_to_frame(result).to_csv(output_file, index=False)
            logger.info(f"\nResults saved to: {output_file}")

        return 0

    except Exception as e:
        logger.error(f"Error during batch run: {e}", exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
