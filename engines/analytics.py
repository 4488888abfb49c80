#!/usr/bin/env python3
"""
Compliance Analytics Aggregator
Organization and department compliance scores derived from the same snapshot
the recommendations were built from
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Dict, Iterable, List

from engines.certification_lifecycle import is_active_certificate
from engines.findings import Priority, Recommendation
from engines.roster import RosterIndex

AT_RISK_SCORE_THRESHOLD = 80      # below: department is a risk area
IMPROVING_SCORE_THRESHOLD = 90    # at or above: improving
DECLINING_SCORE_THRESHOLD = 70    # below: declining
UPCOMING_WINDOW_DAYS = 30


@dataclass
class ComplianceAnalytics:
    """Organization-wide compliance picture"""
    overall_compliance_score: int
    department_scores: Dict[str, int] = field(default_factory=dict)
    risk_areas: List[str] = field(default_factory=list)
    upcoming_requirements: int = 0
    critical_gaps: int = 0
    recommendations_count: int = 0
    improving_areas: List[str] = field(default_factory=list)
    declining_areas: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'overall_compliance_score': self.overall_compliance_score,
            'department_scores': dict(self.department_scores),
            'risk_areas': list(self.risk_areas),
            'upcoming_requirements': self.upcoming_requirements,
            'critical_gaps': self.critical_gaps,
            'recommendations_count': self.recommendations_count,
            'trends_analysis': {
                'improving_areas': list(self.improving_areas),
                'declining_areas': list(self.declining_areas),
            },
        }


def compliance_percentage(compliant: int, total: int) -> int:
    """round(100 * compliant / total), halves rounded up; 100 for an empty population"""
    if total <= 0:
        return 100
    return (200 * compliant + total) // (2 * total)


class ComplianceAnalyticsEngine:

    def calculate(self, roster: RosterIndex, recommendations: Iterable[Recommendation],
                  now: datetime) -> ComplianceAnalytics:
        recommendations = list(recommendations)

        compliant_ids = {
            member.id for member in roster.members
            if any(is_active_certificate(c, now) for c in roster.certificates_for(member))
        }
        overall = compliance_percentage(len(compliant_ids), len(roster.members))

        department_scores = {
            department: compliance_percentage(sum(1 for m in members if m.id in compliant_ids), len(members))
            for department, members in roster.members_by_department().items()
        }

        upcoming_horizon = now + timedelta(days=UPCOMING_WINDOW_DAYS)
        upcoming = sum(
            1 for rec in recommendations
            if rec.due_date is not None and now < rec.due_date < upcoming_horizon
        )

        return ComplianceAnalytics(
            overall_compliance_score=overall,
            department_scores=department_scores,
            risk_areas=[d for d, score in department_scores.items() if score < AT_RISK_SCORE_THRESHOLD],
            upcoming_requirements=upcoming,
            critical_gaps=sum(1 for rec in recommendations if rec.priority == Priority.CRITICAL),
            recommendations_count=len(recommendations),
            improving_areas=[d for d, score in department_scores.items() if score >= IMPROVING_SCORE_THRESHOLD],
            declining_areas=[d for d, score in department_scores.items() if score < DECLINING_SCORE_THRESHOLD],
        )
