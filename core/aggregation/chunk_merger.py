"""Merge of per-chunk analyses into one document analysis.

The merge is a pure left fold over the chunk results in document order. A
chunk whose reply could not be used is passed as ``None`` and contributes
nothing. Each output field has exactly one strategy:

    ==============================================  ============================
    field                                           strategy
    ==============================================  ============================
    clauses                                         CONCAT, then first N (20)
    key_obligations / recommended_actions /         CONCAT_DEDUP (first seen
    compliance_issues                               order kept)
    plain_summary / contract_type                   FIRST (chunk 1 only)
    risk_score                                      MAX (starting at 0)
    risk_level                                      DERIVED from the max score
    payment_terms / expiry_terms                    LAST_NON_EMPTY
    ==============================================  ============================

If every chunk fails the result has empty collections, score 0, the default
summary and "Not specified" terms.
"""

from dataclasses import dataclass, replace
from enum import Enum
from functools import reduce
from typing import Iterable, Sequence

from app.models.analysis import (
    AnalysisResult,
    Clause,
    ExpiryTerms,
    PaymentTerms,
    RiskLevel,
)

DEFAULT_MAX_CLAUSES = 20
DEFAULT_SUMMARY = "Multi-section legal document analyzed successfully."
DEFAULT_CONTRACT_TYPE = "other"


class MergeStrategy(str, Enum):
    """How a field combines across chunks."""
    CONCAT = "concat"
    CONCAT_DEDUP = "concat_dedup"
    FIRST = "first"
    MAX = "max"
    DERIVED = "derived"
    LAST_NON_EMPTY = "last_non_empty"


FIELD_STRATEGIES: dict[str, MergeStrategy] = {
    "clauses": MergeStrategy.CONCAT,
    "key_obligations": MergeStrategy.CONCAT_DEDUP,
    "recommended_actions": MergeStrategy.CONCAT_DEDUP,
    "compliance_issues": MergeStrategy.CONCAT_DEDUP,
    "plain_summary": MergeStrategy.FIRST,
    "contract_type": MergeStrategy.FIRST,
    "risk_score": MergeStrategy.MAX,
    "risk_level": MergeStrategy.DERIVED,
    "payment_terms": MergeStrategy.LAST_NON_EMPTY,
    "expiry_terms": MergeStrategy.LAST_NON_EMPTY,
}


@dataclass(frozen=True)
class MergeState:
    """Accumulator threaded through the fold."""
    chunks_seen: int = 0
    chunks_merged: int = 0
    clauses: tuple[Clause, ...] = ()
    key_obligations: tuple[str, ...] = ()
    recommended_actions: tuple[str, ...] = ()
    compliance_issues: tuple[str, ...] = ()
    plain_summary: str = ""
    contract_type: str = ""
    risk_score: int = 0
    payment_terms: PaymentTerms | None = None
    expiry_terms: ExpiryTerms | None = None


def dedupe(items: Iterable[str]) -> list[str]:
    """Drop repeated strings, keeping first-seen order."""
    return list(dict.fromkeys(items))


def fold_chunk(state: MergeState, result: AnalysisResult | None) -> MergeState:
    """Combine one chunk result (or a skipped chunk) into the accumulator."""
    is_first_chunk = state.chunks_seen == 0
    state = replace(state, chunks_seen=state.chunks_seen + 1)
    if result is None:
        return state

    return replace(
        state,
        chunks_merged=state.chunks_merged + 1,
        clauses=state.clauses + tuple(result.clauses),
        key_obligations=state.key_obligations + tuple(result.key_obligations),
        recommended_actions=state.recommended_actions + tuple(result.recommended_actions),
        compliance_issues=state.compliance_issues + tuple(result.compliance_issues),
        plain_summary=result.plain_summary if is_first_chunk else state.plain_summary,
        contract_type=result.contract_type if is_first_chunk else state.contract_type,
        risk_score=max(state.risk_score, result.risk_score),
        payment_terms=state.payment_terms if result.payment_terms.is_empty else result.payment_terms,
        expiry_terms=state.expiry_terms if result.expiry_terms.is_empty else result.expiry_terms,
    )


def finalize(state: MergeState, max_clauses: int = DEFAULT_MAX_CLAUSES) -> AnalysisResult:
    """Turn the accumulator into the document-level analysis."""
    return AnalysisResult(
        plain_summary=state.plain_summary or DEFAULT_SUMMARY,
        risk_level=RiskLevel.from_score(state.risk_score),
        risk_score=state.risk_score,
        contract_type=state.contract_type or DEFAULT_CONTRACT_TYPE,
        clauses=list(state.clauses[:max_clauses]),
        compliance_issues=dedupe(state.compliance_issues),
        recommended_actions=dedupe(state.recommended_actions),
        key_obligations=dedupe(state.key_obligations),
        payment_terms=state.payment_terms or PaymentTerms.placeholder(),
        expiry_terms=state.expiry_terms or ExpiryTerms.placeholder(),
    )


def merge_chunk_results(
    results: Sequence[AnalysisResult | None],
    max_clauses: int = DEFAULT_MAX_CLAUSES,
) -> AnalysisResult:
    """Merge ordered chunk results into a single analysis.

    Args:
        results: One entry per chunk in document order; ``None`` for a chunk
            that produced no usable result.
        max_clauses: How many clauses to keep after concatenation.

    Returns:
        The merged AnalysisResult.
    """
    return finalize(reduce(fold_chunk, results, MergeState()), max_clauses)
