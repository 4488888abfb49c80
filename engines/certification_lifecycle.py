#!/usr/bin/env python3
"""
Certification Lifecycle Analyzer
Classifies certificates as current, expiring soon or expired and raises
renewal recommendations for everything inside the lookahead window
"""

from datetime import datetime, timedelta
from enum import Enum
from typing import Iterable, List

from database.records import Certificate, CertificateStatus
from engines.findings import CostImpact, Priority, Recommendation, RecommendationType
from engines.roster import RosterIndex

# Certificates expiring within this many days (inclusive) need renewal now
EXPIRING_SOON_WINDOW_DAYS = 30


class LifecycleStatus(Enum):
    CURRENT = "current"
    EXPIRING_SOON = "expiring_soon"
    EXPIRED = "expired"


def classify_certificate(cert: Certificate, now: datetime) -> LifecycleStatus:
    """Classify a certificate relative to now; non-expiring certificates are always current"""
    if cert.expiration_date is None:
        return LifecycleStatus.CURRENT
    if cert.expiration_date < now:
        return LifecycleStatus.EXPIRED
    if cert.expiration_date <= now + timedelta(days=EXPIRING_SOON_WINDOW_DAYS):
        return LifecycleStatus.EXPIRING_SOON
    return LifecycleStatus.CURRENT


def is_active_certificate(cert: Certificate, now: datetime) -> bool:
    """Active means status active and not expired as of now"""
    return (
        cert.status == CertificateStatus.ACTIVE
        and classify_certificate(cert, now) != LifecycleStatus.EXPIRED
    )


def get_expiring_certificates(certificates: Iterable[Certificate], days: int,
                              now: datetime) -> List[Certificate]:
    """Certificates expiring after now and before now + days"""
    horizon = now + timedelta(days=days)
    return [
        cert for cert in certificates
        if cert.expiration_date is not None and now < cert.expiration_date < horizon
    ]


def get_overdue_certificates(certificates: Iterable[Certificate], now: datetime) -> List[Certificate]:
    """Certificates whose expiration date has passed"""
    return [
        cert for cert in certificates
        if cert.expiration_date is not None and cert.expiration_date < now
    ]


class CertificationLifecycleAnalyzer:
    """Turns expired and expiring certificates into renewal recommendations"""

    def analyze(self, roster: RosterIndex, now: datetime) -> List[Recommendation]:
        recommendations = []
        for cert in roster.certificates:
            status = classify_certificate(cert, now)
            if status == LifecycleStatus.CURRENT:
                continue
            recommendations.append(self._renewal_recommendation(cert, status, roster, now))
        return recommendations

    def _renewal_recommendation(self, cert: Certificate, status: LifecycleStatus,
                                roster: RosterIndex, now: datetime) -> Recommendation:
        expired = status == LifecycleStatus.EXPIRED
        holder = roster.holder_of(cert)
        expires_on = cert.expiration_date.strftime('%Y-%m-%d')

        if expired:
            title = f"{cert.certification_type} Expired"
            description = (f"{cert.holder_name}'s {cert.certification_type} certificate "
                           f"expired on {expires_on}")
        else:
            title = f"{cert.certification_type} Expiring Soon"
            description = (f"{cert.holder_name}'s {cert.certification_type} certificate "
                           f"expires on {expires_on}")

        return Recommendation(
            id=f"cert-renewal-{cert.id}",
            employee_id=holder.id if holder else None,
            employee_name=cert.holder_name,
            department=holder.department if holder else None,
            type=RecommendationType.COMPLIANCE_GAP if expired else RecommendationType.CERTIFICATION_EXPIRING,
            priority=Priority.CRITICAL if expired else Priority.HIGH,
            title=title,
            description=description,
            action_required=f"Schedule immediate renewal training for {cert.certification_type}",
            due_date=now if expired else cert.expiration_date,
            estimated_completion_time="4-8 hours",
            compliance_standards=list(cert.standards),
            cost_impact=CostImpact.MEDIUM,
            risk_level=Priority.CRITICAL if expired else Priority.HIGH,
            recommended_training=[cert.certification_type],
            created_at=now,
        )
