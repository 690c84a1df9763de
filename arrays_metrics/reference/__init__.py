"""Known-site reference loaders."""

from arrays_metrics.reference.dbsnp import MembershipIndex

__all__ = ["MembershipIndex"]
