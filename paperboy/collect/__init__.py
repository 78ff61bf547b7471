"""Snapshot collection, aggregation, ranking and enrichment."""
from .aggregate import Aggregator, aggregate, build_url, join_bucket
from .chartbeat import ChartbeatClient, SnapshotClient
from .enrich import Enricher, extract_attribute
from .intervals import plan_intervals
from .rank import rank
from .rewrite import FilterRule, RuleRewriter, identity_rewriter, load_rules

__all__ = [
    "Aggregator",
    "aggregate",
    "build_url",
    "join_bucket",
    "ChartbeatClient",
    "SnapshotClient",
    "Enricher",
    "extract_attribute",
    "plan_intervals",
    "rank",
    "FilterRule",
    "RuleRewriter",
    "identity_rewriter",
    "load_rules",
]
