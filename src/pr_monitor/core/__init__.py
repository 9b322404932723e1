"""Core domain layer."""

from pr_monitor.core.aggregator import aggregate
from pr_monitor.core.change_detector import detect_changes
from pr_monitor.core.entities import (
    AggregatedPullRequest,
    Category,
    Change,
    ChangeKind,
    Facet,
    FacetBatch,
    Label,
    PollOutcome,
    PullRequest,
    RateLimit,
    ReadStatus,
    composite_key,
    parse_timestamp,
)
from pr_monitor.core.interfaces import Notifier, PullRequestSource
from pr_monitor.core.policy import ExcludedLabels, IgnoreList
from pr_monitor.core.read_state import ReadStateTracker
from pr_monitor.core.storage import StateStore

__all__ = [
    "AggregatedPullRequest",
    "Category",
    "Change",
    "ChangeKind",
    "Facet",
    "FacetBatch",
    "Label",
    "PollOutcome",
    "PullRequest",
    "RateLimit",
    "ReadStatus",
    "composite_key",
    "parse_timestamp",
    "Notifier",
    "PullRequestSource",
    "ExcludedLabels",
    "IgnoreList",
    "ReadStateTracker",
    "StateStore",
    "aggregate",
    "detect_changes",
]
