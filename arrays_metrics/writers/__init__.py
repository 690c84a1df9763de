"""Output file writers for metrics files and console summaries."""

from arrays_metrics.writers.log import print_summary
from arrays_metrics.writers.metrics_file import write_all

__all__ = ["print_summary", "write_all"]
