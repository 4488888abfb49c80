#!/usr/bin/env python3
"""
Requirement Gap Detection Engine
Cross-references each active member's certifications against the department
requirement catalog and raises one recommendation per missing certification
"""

from datetime import datetime, timedelta
from typing import List, Set

from database.records import EmploymentStatus, WorkforceMember
from engines.catalog import DepartmentRequirement, RequirementCatalog
from engines.certification_lifecycle import is_active_certificate
from engines.findings import CostImpact, Recommendation, RecommendationType, identifier_fragments
from engines.roster import RosterIndex


class GapAnalysisEngine:
    """
    Detects missing required certifications per (member, requirement) pair.
    No aggregation across members happens here; department-level signals
    belong to the risk assessment engine.
    """

    def __init__(self, catalog: RequirementCatalog):
        self.catalog = catalog

    def active_certification_types(self, member: WorkforceMember, roster: RosterIndex,
                                   now: datetime) -> Set[str]:
        return {
            cert.certification_type
            for cert in roster.certificates_for(member)
            if is_active_certificate(cert, now)
        }

    def missing_requirements(self, member: WorkforceMember, roster: RosterIndex,
                             now: datetime) -> List[DepartmentRequirement]:
        """Catalog requirements of the member's department the member does not actively hold"""
        held = self.active_certification_types(member, roster, now)
        missing = []
        for requirement in self.catalog.requirements_for(member.department):
            if requirement.certification in held:
                continue
            # a catalog listing the same certification twice still yields one gap
            held.add(requirement.certification)
            missing.append(requirement)
        return missing

    def analyze(self, roster: RosterIndex, now: datetime) -> List[Recommendation]:
        recommendations = []
        for member in roster.members:
            # Only members currently employed can be enrolled
            if member.employment_status != EmploymentStatus.ACTIVE:
                continue
            fragments = identifier_fragments(
                r.certification for r in self.catalog.requirements_for(member.department)
            )
            for requirement in self.missing_requirements(member, roster, now):
                recommendations.append(self._missing_certification_recommendation(
                    member, requirement, fragments[requirement.certification], now))
        return recommendations

    def _missing_certification_recommendation(self, member: WorkforceMember,
                                              requirement: DepartmentRequirement,
                                              fragment: str, now: datetime) -> Recommendation:
        return Recommendation(
            id=f"missing-cert-{member.id}-{fragment}",
            employee_id=member.id,
            employee_name=member.full_name,
            department=member.department,
            type=RecommendationType.TRAINING_REQUIRED,
            priority=requirement.criticality,
            title=f"Missing Required Certification: {requirement.certification}",
            description=(f"{member.full_name} requires {requirement.certification} certification "
                         f"for their role in {member.department}"),
            action_required=f"Enroll in {requirement.certification} training program",
            due_date=now + timedelta(days=requirement.grace_period_days),
            estimated_completion_time=requirement.duration,
            compliance_standards=list(requirement.standards),
            cost_impact=CostImpact.MEDIUM,
            risk_level=requirement.criticality,
            recommended_training=[requirement.certification],
            created_at=now,
        )
