#!/usr/bin/env python3
"""
Compliance Recommendation Engine
Builds a prioritized list of compliance actions and organization analytics
from one read-only snapshot of an organization's records
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

import numpy as np

from core.config import AppConfig, get_config
from core.logging import evaluation_context, get_logger, setup_logging
from database.records import OrganizationSnapshot, as_utc, utc_now
from database.repository import RecordRepository, SqliteRecordRepository, fetch_snapshot
from engines.analytics import ComplianceAnalytics, ComplianceAnalyticsEngine
from engines.catalog import RequirementCatalog, load_catalog
from engines.certification_lifecycle import CertificationLifecycleAnalyzer
from engines.findings import Recommendation, RecommendationType
from engines.gap_analysis import GapAnalysisEngine
from engines.insights import (
    InsightAugmenter,
    NarrativeProvider,
    build_narrative_provider,
    build_narrative_summary,
)
from engines.risk_assessment import RiskAssessmentEngine
from engines.roster import RosterIndex
from engines.trends import ProactiveTrendAnalyzer

logger = get_logger(__name__)

# Recommendation types that carry the organization narrative as their insight
NARRATIVE_RECOMMENDATION_TYPES = {
    RecommendationType.PROACTIVE_TRAINING,
    RecommendationType.RISK_MITIGATION,
}


@dataclass
class ComplianceReport:
    """Result of one recommendation run"""
    organization_id: str
    recommendations: List[Recommendation]
    analytics: ComplianceAnalytics
    catalog_version: str
    generated_at: datetime
    narrative: Optional[str] = None
    department_risk_scores: Dict[str, float] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'organization_id': self.organization_id,
            'recommendations': [rec.to_dict() for rec in self.recommendations],
            'analytics': self.analytics.to_dict(),
            'narrative': self.narrative,
            'catalog_version': self.catalog_version,
            'department_risk_scores': dict(self.department_risk_scores),
            'generated_at': self.generated_at.isoformat(),
        }


def prioritize_recommendations(recommendations: Iterable[Recommendation]) -> List[Recommendation]:
    """
    Canonical order: priority rank descending, then due date ascending.
    Undated items sort last within their priority tier; the sort is stable
    so ties keep their concatenation order.
    """
    return sorted(
        recommendations,
        key=lambda rec: (
            -rec.priority.rank,
            rec.due_date is None,
            rec.due_date.timestamp() if rec.due_date is not None else 0.0,
        ),
    )


class RecommendationEngine:
    """
    Compliance recommendation engine that runs the lifecycle, gap, trend and
    risk analyzers over the same snapshot and merges their findings
    """

    def __init__(self, repository: RecordRepository,
                 catalog: Optional[RequirementCatalog] = None,
                 narrative_provider: Optional[NarrativeProvider] = None,
                 config: Optional[AppConfig] = None):
        self.config = config or get_config()
        self.repository = repository
        self.catalog = catalog or load_catalog(self.config.requirement_catalog_path)

        narrative_settings = self.config.narrative
        self.insight_augmenter = InsightAugmenter(
            narrative_provider or build_narrative_provider(narrative_settings),
            timeout_seconds=narrative_settings.timeout_seconds,
        )

        self.lifecycle_analyzer = CertificationLifecycleAnalyzer()
        self.gap_engine = GapAnalysisEngine(self.catalog)
        self.trend_analyzer = ProactiveTrendAnalyzer()
        self.risk_engine = RiskAssessmentEngine()
        self.analytics_engine = ComplianceAnalyticsEngine()

    @classmethod
    def from_config(cls, config: Optional[AppConfig] = None) -> "RecommendationEngine":
        """Engine backed by the configured SQLite record store"""
        setup_logging()
        config = config or get_config()
        return cls(SqliteRecordRepository(config.database_url), config=config)

    def generate_recommendations(self, organization_id: str, *, include_narrative: bool = True,
                                 now: Optional[datetime] = None) -> ComplianceReport:
        """Generate prioritized recommendations and analytics for one organization"""

        now = as_utc(now) if now is not None else utc_now()
        with evaluation_context(organization_id, self.catalog.version):
            snapshot = fetch_snapshot(
                self.repository, organization_id, max_workers=self.config.fetch_max_workers
            )
            report = self.evaluate_snapshot(snapshot, now, include_narrative=include_narrative)

            logger.info(
                "recommendations_generated",
                recommendations=len(report.recommendations),
                critical=report.analytics.critical_gaps,
                overall_score=report.analytics.overall_compliance_score,
                average_department_score=_average(report.analytics.department_scores.values()),
                narrative_included=report.narrative is not None,
            )
            return report

    def get_compliance_analytics(self, organization_id: str, *,
                                 now: Optional[datetime] = None) -> ComplianceAnalytics:
        """Analytics only; the narrative is never requested"""
        return self.generate_recommendations(organization_id, include_narrative=False, now=now).analytics

    def evaluate_snapshot(self, snapshot: OrganizationSnapshot, now: datetime, *,
                          include_narrative: bool = True) -> ComplianceReport:
        """Run every analyzer over an already fetched snapshot"""

        now = as_utc(now)
        roster = RosterIndex(snapshot.members, snapshot.certificates)

        expiring = self.lifecycle_analyzer.analyze(roster, now)
        missing = self.gap_engine.analyze(roster, now)
        trends = self.trend_analyzer.analyze(snapshot.documents, now)
        risk_profiles = self.risk_engine.assess_departments(roster, now)
        department_risks = self.risk_engine.mitigation_recommendations(risk_profiles, now)

        findings = expiring + missing + trends + department_risks

        narrative = None
        if include_narrative:
            summary = build_narrative_summary(snapshot, findings, now)
            narrative = self.insight_augmenter.generate(summary)
            # a disabled provider yields the stock fallback text, which is no insight
            if self.insight_augmenter.enabled:
                for rec in findings:
                    if rec.type in NARRATIVE_RECOMMENDATION_TYPES:
                        rec.ai_insight = narrative

        recommendations = prioritize_recommendations(findings)
        analytics = self.analytics_engine.calculate(roster, recommendations, now)

        return ComplianceReport(
            organization_id=snapshot.organization_id,
            recommendations=recommendations,
            analytics=analytics,
            catalog_version=self.catalog.version,
            generated_at=now,
            narrative=narrative,
            department_risk_scores={d: p.risk_score for d, p in risk_profiles.items()},
        )


def _average(scores: Iterable[int]) -> Optional[float]:
    values = list(scores)
    return round(float(np.mean(values)), 1) if values else None
