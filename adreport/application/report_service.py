"""Application service for the analysis-report use case."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from time import perf_counter
from typing import Any, Dict, List, Mapping, Tuple

from adreport.application.aggregation import aggregate_documents
from adreport.application.assembly import apply_anchors, build_request, parse_report_text
from adreport.application.invocation import ReportCollaborator, ResilientInvoker, RetryPolicy, invoke_collaborator
from adreport.application.selection import reduced_cost_total, select_top_cost_rows
from adreport.domain.errors import InputTooLargeError, MissingDocumentError
from adreport.domain.models import (
    AggregateTotals,
    DocumentOutcome,
    DocumentRole,
    RawDocument,
    ReducedDocument,
    ReportFamily,
)
from adreport.domain.vocabulary import FamilyProfile, family_profile
from adreport.ingestion import documents_from_texts
from adreport.settings import Settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReportResult:
    family: ReportFamily
    report: Dict[str, Any]
    totals: AggregateTotals
    outcomes: Dict[DocumentRole, DocumentOutcome]
    reduced: Tuple[ReducedDocument, ...]
    stage_timings: List[Tuple[str, float]] = field(default_factory=list)
    attempts: int = 0

    def meta(self) -> Dict[str, Any]:
        documents: Dict[str, Any] = {}
        for reduced in self.reduced:
            outcome = self.outcomes.get(reduced.role)
            entry: Dict[str, Any] = {
                "reduced_rows": len(reduced.rows),
                "limit": reduced.limit,
                "fallback": reduced.fallback,
            }
            if outcome is not None and outcome.totals is not None:
                entry["coverage"] = outcome.totals.coverage.to_dict()
                entry["total_cost"] = outcome.totals.total_cost
            if outcome is not None and outcome.error is not None:
                entry["error"] = str(outcome.error)
            documents[reduced.role.value] = entry
        return {
            "family": self.family.value,
            "anchors": self.totals.to_dict(),
            "documents": documents,
            "attempts": self.attempts,
            "stage_timings": {name: round(seconds, 4) for name, seconds in self.stage_timings},
        }


def _check_inputs(family: FamilyProfile, texts: Mapping[DocumentRole, str], max_total_bytes: int | None) -> None:
    missing = [role.value for role in family.roles if not (texts.get(role) or "").strip()]
    if missing:
        raise MissingDocumentError(missing)
    if max_total_bytes is not None:
        total_bytes = sum(len(texts[role].encode("utf-8")) for role in family.roles)
        if total_bytes > max_total_bytes:
            raise InputTooLargeError(total_bytes, max_total_bytes)


def _authoritative_totals(family: FamilyProfile, outcomes: Mapping[DocumentRole, DocumentOutcome]) -> AggregateTotals:
    for role, outcome in outcomes.items():
        if role != family.authoritative_role and outcome.error is not None:
            logger.info("No totals for %s document: %s", role.value, outcome.error)

    authoritative = outcomes[family.authoritative_role]
    if authoritative.error is not None or authoritative.totals is None:
        raise authoritative.error or MissingDocumentError([family.authoritative_role.value])
    return authoritative.totals


def reduce_documents(family: FamilyProfile, documents: Mapping[DocumentRole, RawDocument]) -> Tuple[ReducedDocument, ...]:
    reduced: List[ReducedDocument] = []
    for role in family.roles:
        profile = family.document(role)
        result = select_top_cost_rows(
            documents[role],
            limit=profile.top_n,
            profile=profile,
            fragments=family.fragments_for(role),
            max_chars=profile.max_chars,
        )
        if result.fallback:
            logger.warning("%s document: cost header not found, passing first %d lines unsorted", role.value, profile.top_n)
        reduced.append(result)
    return tuple(reduced)


def summarize_totals(
    family: ReportFamily | str,
    texts: Mapping[DocumentRole, str],
) -> Tuple[AggregateTotals, Dict[DocumentRole, DocumentOutcome]]:
    """Local totals only (no collaborator call)."""
    profile = family_profile(family)
    supplied = {role: text for role, text in texts.items() if role in profile.roles}
    outcomes = aggregate_documents(documents_from_texts(supplied), profile)
    if profile.authoritative_role not in outcomes:
        raise MissingDocumentError([profile.authoritative_role.value])
    return _authoritative_totals(profile, outcomes), outcomes


def generate_report(
    family: ReportFamily | str,
    texts: Mapping[DocumentRole, str],
    client: ReportCollaborator,
    settings: Settings | None = None,
    invoker: ResilientInvoker | None = None,
) -> ReportResult:
    """Run ingestion, aggregation, reduction and the collaborator call; never returns a partial report."""
    settings = settings or Settings()
    profile = family_profile(family)
    invoker = invoker or ResilientInvoker(
        RetryPolicy(
            max_attempts=settings.max_attempts,
            initial_delay_s=settings.initial_backoff_s,
            deadline_s=settings.deadline_s,
        )
    )

    pipeline_start = perf_counter()
    stage_start = pipeline_start
    stage_timings: List[Tuple[str, float]] = []

    def _mark(stage_name: str) -> None:
        nonlocal stage_start
        now = perf_counter()
        stage_timings.append((stage_name, now - stage_start))
        stage_start = now

    _check_inputs(profile, texts, settings.max_total_bytes)
    documents = documents_from_texts({role: texts[role] for role in profile.roles})
    _mark("load_documents")

    outcomes = aggregate_documents(documents, profile)
    totals = _authoritative_totals(profile, outcomes)
    _mark("aggregate")

    reduced = reduce_documents(profile, documents)
    for item in reduced:
        outcome = outcomes.get(item.role)
        if outcome is None or outcome.totals is None or outcome.totals.total_cost <= 0:
            continue
        share = reduced_cost_total(item, profile.fragments_for(item.role)) / outcome.totals.total_cost
        logger.info("%s payload keeps %d rows covering %.1f%% of spend", item.role.value, len(item.rows), share * 100)
    _mark("reduce")

    request = build_request(profile, totals, reduced)
    _mark("build_request")

    text = invoke_collaborator(client, request.prompt, invoker)
    _mark("invoke")

    report = apply_anchors(parse_report_text(text), totals, profile.family)
    _mark("parse")
    stage_timings.append(("total", perf_counter() - pipeline_start))

    return ReportResult(
        family=profile.family,
        report=report,
        totals=totals,
        outcomes=outcomes,
        reduced=reduced,
        stage_timings=stage_timings,
        attempts=invoker.attempts,
    )
