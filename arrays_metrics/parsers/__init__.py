"""Readers for arrays VCFs, their header metadata and sequence dictionaries."""

from arrays_metrics.parsers.header import build_sample_templates, parse_control_infos
from arrays_metrics.parsers.sequence_dict import load_sequence_dictionary
from arrays_metrics.parsers.vcf import ShardSpec, VcfHeader, VcfSource, read_header

__all__ = [
    "ShardSpec",
    "VcfHeader",
    "VcfSource",
    "read_header",
    "build_sample_templates",
    "parse_control_infos",
    "load_sequence_dictionary",
]
