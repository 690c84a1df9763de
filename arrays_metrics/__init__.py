"""
Genotyping Arrays Variant Calling Metrics.

Collects summary and per-sample call-quality metrics from an Illumina
genotyping-arrays VCF, scanning shards of the file in parallel and merging
the partial results into one report.
"""

__version__ = "1.0.0"
__author__ = "Data Tecnica International"
