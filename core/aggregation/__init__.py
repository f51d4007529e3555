"""Aggregation of partial (per-chunk) model results."""

from .chunk_merger import FIELD_STRATEGIES, MergeStrategy, merge_chunk_results

__all__ = ["FIELD_STRATEGIES", "MergeStrategy", "merge_chunk_results"]
