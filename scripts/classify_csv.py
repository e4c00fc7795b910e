#!/usr/bin/env python3
"""
CLI script for classifying a CSV file of orbital states.
Prints batch statistics and the first failed rows, and can write the
prediction log export.
"""

import sys
from pathlib import Path

import click

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from satclass.core.exceptions import BatchProcessingError
from satclass.ml.batch import BatchProcessor
from satclass.ml.classifier import RuleClassifier
from satclass.monitoring import PredictionLog
from satclass.utils.config_loader import Config
from satclass.utils.logging_config import LogConfig, get_logger

logger = get_logger("batch")


@click.command()
@click.argument('csv_file', type=click.Path(exists=True, dir_okay=False))
@click.option(
    '--config-dir',
    '-c',
    default='config',
    type=click.Path(file_okay=False),
    help='Directory with YAML configuration files'
)
@click.option(
    '--export',
    '-o',
    type=click.Path(dir_okay=False),
    help='Write the prediction log as CSV to this path'
)
@click.option(
    '--workers',
    '-w',
    type=int,
    help='Threads for per-row classification (overrides batch.yaml)'
)
@click.option(
    '--log-level',
    default='INFO',
    type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR'], case_sensitive=False),
    help='Console log level'
)
def main(csv_file, config_dir, export, workers, log_level):
    """Classify every row of CSV_FILE as ISS or Sentinel1A."""
    LogConfig.setup(log_level=log_level.upper(), enable_json=False)

    config = Config(Path(config_dir)).load_all()
    batch_config = config.batch
    if workers is not None:
        batch_config = batch_config.model_copy(update={"max_workers": max(1, workers)})

    prediction_log = PredictionLog()
    processor = BatchProcessor(
        RuleClassifier(config.classifier, config.validation),
        batch_config,
        prediction_log,
    )

    text = Path(csv_file).read_text(encoding='utf-8')
    try:
        result = processor.process_batch(text)
    except BatchProcessingError as e:
        click.echo(f"Error processing CSV: {e.message}", err=True)
        for failure in e.failures[:batch_config.max_error_summary]:
            click.echo(f"  {failure}", err=True)
        sys.exit(1)

    stats = result.stats
    click.echo(f"Batch Prediction Results ({stats.success_count} rows processed)")
    for name, count in stats.count_by_class.items():
        click.echo(f"  {name} classifications: {count}")
    click.echo(f"  Average confidence: {stats.mean_confidence * 100:.1f}%")
    click.echo(f"  Average altitude:   {stats.mean_altitude_km:.2f} km")
    click.echo(f"  Processing time:    {result.elapsed_ms:.2f} ms")

    if result.failures:
        click.echo(f"\n{stats.failure_count} rows failed:")
        click.echo(result.error_summary(batch_config.max_error_summary))

    if export:
        Path(export).write_text(prediction_log.export_csv() + "\n", encoding='utf-8')
        click.echo(f"\nPrediction log written to {export}")


if __name__ == '__main__':
    main()
