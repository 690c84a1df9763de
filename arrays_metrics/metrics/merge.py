"""Merge engine for partial results.

Merging interprets the field policy registries: SUM fields add,
ASSERT_EQUAL fields must agree, DERIVED fields stay unresolved. Because
every step is associative and commutative, the final result does not
depend on shard count, shard size or merge order.
"""

import dataclasses
import logging
import math
from collections.abc import Iterable
from functools import reduce
from typing import Any, TypeVar

from arrays_metrics.exceptions import DataIntegrityError
from arrays_metrics.metrics.partial import PartialResult
from arrays_metrics.metrics.policy import (
    CALLING_POLICIES,
    SAMPLE_POLICIES,
    FieldPolicyRegistry,
    MergePolicy,
)
from arrays_metrics.metrics.records import NOT_COMPUTED, SampleMetrics
from arrays_metrics.models import SampleIdentity

logger = logging.getLogger(__name__)

R = TypeVar("R")


def _same_value(a: Any, b: Any) -> bool:
    """Equality for invariant fields; two NaN floats count as equal."""
    if isinstance(a, float) and isinstance(b, float) and math.isnan(a) and math.isnan(b):
        return True
    return a == b


def merge_records(
    left: R,
    right: R,
    registry: FieldPolicyRegistry,
    path: str = "",
) -> R:
    """Combine two records of the same type field by field.

    Args:
        left: First record
        right: Second record
        registry: Policies for the record's fields
        path: Dotted prefix used to name fields in error messages

    Returns:
        New record of the same type; derived fields are NOT_COMPUTED

    Raises:
        DataIntegrityError: If an ASSERT_EQUAL field disagrees
        ConfigurationError: If a field has no registered policy
    """
    if type(left) is not type(right):
        raise DataIntegrityError(
            f"Cannot merge {type(left).__name__} with {type(right).__name__}",
            field=path or None,
            left=left,
            right=right,
        )

    merged: dict[str, Any] = {}
    for f in dataclasses.fields(left):
        name = f"{path}{f.name}"
        a = getattr(left, f.name)
        b = getattr(right, f.name)

        embedded = registry.embedded_registry(f.name)
        if embedded is not None:
            merged[f.name] = merge_records(a, b, embedded, path=f"{name}.")
            continue

        policy = registry.policy_for(f.name)
        if policy is MergePolicy.SUM:
            merged[f.name] = a + b
        elif policy is MergePolicy.ASSERT_EQUAL:
            if not _same_value(a, b):
                raise DataIntegrityError(
                    f"Field '{name}' differs between merged results: {a!r} != {b!r}",
                    field=name,
                    left=a,
                    right=b,
                )
            merged[f.name] = a
        else:
            merged[f.name] = NOT_COMPUTED

    return type(left)(**merged)


def merge_samples(left: SampleMetrics, right: SampleMetrics) -> SampleMetrics:
    """Merge two per-sample records for the same identity."""
    return merge_records(left, right, SAMPLE_POLICIES)


def merge(a: PartialResult, b: PartialResult) -> PartialResult:
    """Combine two partial results.

    The summary records are merged with the calling registry. Sample maps
    are joined on identity: samples on one side only pass through, samples
    on both sides are merged field by field.

    Args:
        a: First partial result
        b: Second partial result

    Returns:
        New partial result; neither input is modified
    """
    summary = merge_records(a.summary, b.summary, CALLING_POLICIES)

    samples: dict[SampleIdentity, SampleMetrics] = dict(a.samples)
    for identity, sample in b.samples.items():
        if identity in samples:
            samples[identity] = merge_samples(samples[identity], sample)
        else:
            samples[identity] = sample

    return PartialResult(summary=summary, samples=samples)


def merge_all(partials: Iterable[PartialResult]) -> PartialResult:
    """Fold any number of partial results into one.

    Args:
        partials: Partial results in any order

    Returns:
        Merged partial result (empty if no partials were given)
    """
    partials = list(partials)
    logger.debug(f"Merging {len(partials)} partial results")
    return reduce(merge, partials, PartialResult())
