#!/usr/bin/env python3
"""
Department Risk Assessment
Additive risk heuristic per department combining certification coverage,
upcoming expirations and recent training activity
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Dict, List

import numpy as np

from database.records import WorkforceMember
from engines.findings import CostImpact, Priority, Recommendation, RecommendationType, identifier_fragments
from engines.roster import RosterIndex

# Heuristic weights and thresholds. They carry no statistical meaning; a
# triggered factor adds its full weight and the sum is capped.
COVERAGE_WEIGHT = 0.3
COVERAGE_THRESHOLD = 0.8          # certified members / members below this is a risk
EXPIRING_WEIGHT = 0.3
EXPIRING_WINDOW_DAYS = 60
EXPIRING_RATIO_THRESHOLD = 0.2    # expiring certificates / certificates above this is a risk
STALENESS_WEIGHT = 0.4
RECENT_ACTIVITY_DAYS = 90
MAX_RISK_SCORE = 1.0
RISK_MITIGATION_THRESHOLD = 0.7   # strictly above: emit a risk_mitigation recommendation
CRITICAL_RISK_THRESHOLD = 0.9     # strictly above: critical priority

MITIGATION_DUE_DAYS = 14


@dataclass
class RiskFactor:
    """A triggered department risk signal"""
    name: str
    issue: str
    weight: float
    observed: float
    recommended_training: str


@dataclass
class DepartmentRiskProfile:
    """Risk assessment for one department"""
    department: str
    member_count: int
    certificate_count: int
    coverage_ratio: float
    expiring_ratio: float
    recent_certificate_count: int
    risk_score: float
    risk_factors: List[RiskFactor] = field(default_factory=list)

    @property
    def issues(self) -> List[str]:
        return [factor.issue for factor in self.risk_factors]

    @property
    def recommended_training(self) -> List[str]:
        return [factor.recommended_training for factor in self.risk_factors]


class RiskAssessmentEngine:
    """
    Scores each department from its own members and their certificates.
    Factors are evaluated in a fixed order (coverage, expiring, staleness)
    which is also the order issues are reported in.
    """

    def assess_department(self, department: str, members: List[WorkforceMember],
                          roster: RosterIndex, now: datetime) -> DepartmentRiskProfile:
        certificates = roster.department_certificates(members)
        risk_factors = []

        # Risk Factor 1: low certification coverage
        coverage_ratio = float(np.mean([bool(roster.certificates_for(m)) for m in members])) if members else 1.0
        if coverage_ratio < COVERAGE_THRESHOLD:
            risk_factors.append(RiskFactor(
                name='coverage',
                issue='low certification coverage',
                weight=COVERAGE_WEIGHT,
                observed=coverage_ratio,
                recommended_training='Department-wide certification program',
            ))

        # Risk Factor 2: expiring certificates
        expiring_horizon = now + timedelta(days=EXPIRING_WINDOW_DAYS)
        expiring_ratio = 0.0
        if certificates:
            expiring_ratio = float(np.mean([
                c.expiration_date is not None and c.expiration_date < expiring_horizon
                for c in certificates
            ]))
        if expiring_ratio > EXPIRING_RATIO_THRESHOLD:
            risk_factors.append(RiskFactor(
                name='expiring',
                issue='multiple expiring certificates',
                weight=EXPIRING_WEIGHT,
                observed=expiring_ratio,
                recommended_training='Renewal training program',
            ))

        # Risk Factor 3: no recent training activity
        recent_cutoff = now - timedelta(days=RECENT_ACTIVITY_DAYS)
        recent_count = sum(1 for c in certificates if c.created_at > recent_cutoff)
        if certificates and recent_count == 0:
            risk_factors.append(RiskFactor(
                name='staleness',
                issue='no recent training activity',
                weight=STALENESS_WEIGHT,
                observed=0.0,
                recommended_training='Refresher training sessions',
            ))

        risk_score = round(min(sum(f.weight for f in risk_factors), MAX_RISK_SCORE), 2)

        return DepartmentRiskProfile(
            department=department,
            member_count=len(members),
            certificate_count=len(certificates),
            coverage_ratio=round(coverage_ratio, 3),
            expiring_ratio=round(expiring_ratio, 3),
            recent_certificate_count=recent_count,
            risk_score=risk_score,
            risk_factors=risk_factors,
        )

    def assess_departments(self, roster: RosterIndex, now: datetime) -> Dict[str, DepartmentRiskProfile]:
        return {
            department: self.assess_department(department, members, roster, now)
            for department, members in roster.members_by_department().items()
        }

    def analyze(self, roster: RosterIndex, now: datetime) -> List[Recommendation]:
        return self.mitigation_recommendations(self.assess_departments(roster, now), now)

    def mitigation_recommendations(self, profiles: Dict[str, DepartmentRiskProfile],
                                   now: datetime) -> List[Recommendation]:
        fragments = identifier_fragments(profiles)
        return [
            self._risk_mitigation_recommendation(profile, fragments[department], now)
            for department, profile in profiles.items()
            if profile.risk_score > RISK_MITIGATION_THRESHOLD
        ]

    def _risk_mitigation_recommendation(self, profile: DepartmentRiskProfile, fragment: str,
                                        now: datetime) -> Recommendation:
        department = profile.department
        return Recommendation(
            id=f"dept-risk-{fragment}",
            department=department,
            type=RecommendationType.RISK_MITIGATION,
            priority=Priority.CRITICAL if profile.risk_score > CRITICAL_RISK_THRESHOLD else Priority.HIGH,
            title=f"High Risk Department: {department}",
            description=f"{department} shows elevated compliance risk with {', '.join(profile.issues)}",
            action_required=f"Implement comprehensive safety review and targeted training for {department}",
            due_date=now + timedelta(days=MITIGATION_DUE_DAYS),
            estimated_completion_time="1-2 weeks",
            compliance_standards=["29 CFR 1926", "29 CFR 1910"],
            cost_impact=CostImpact.HIGH,
            risk_level=Priority.CRITICAL,
            recommended_training=profile.recommended_training,
            created_at=now,
        )
