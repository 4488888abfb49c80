from datetime import timedelta

from database.records import CertificateStatus
from engines.certification_lifecycle import (
    CertificationLifecycleAnalyzer,
    LifecycleStatus,
    classify_certificate,
    get_expiring_certificates,
    get_overdue_certificates,
    is_active_certificate,
)
from engines.findings import Priority, RecommendationType
from engines.roster import RosterIndex


def test_expiring_exactly_at_window_edge_is_expiring_soon(now, make_member, make_certificate):
    member = make_member("m-1", "Ana")
    cert = make_certificate("c-1", member, expires_in_days=30)

    assert classify_certificate(cert, now) == LifecycleStatus.EXPIRING_SOON
    assert classify_certificate(make_certificate("c-2", member, expires_in_days=31), now) == LifecycleStatus.CURRENT


def test_certificate_without_expiry_is_current(now, make_member, make_certificate):
    cert = make_certificate("c-1", make_member("m-1", "Ana"), expires_in_days=None)

    assert classify_certificate(cert, now) == LifecycleStatus.CURRENT
    assert CertificationLifecycleAnalyzer().analyze(RosterIndex([], [cert]), now) == []


def test_expired_yesterday_is_critical_gap_due_now(now, make_member, make_certificate):
    member = make_member("m-1", "Ana", department="Maintenance")
    cert = make_certificate("c-1", member, certification_type="Electrical Safety", expires_in_days=-1)

    [rec] = CertificationLifecycleAnalyzer().analyze(RosterIndex([member], [cert]), now)

    assert rec.id == "cert-renewal-c-1"
    assert rec.type == RecommendationType.COMPLIANCE_GAP
    assert rec.priority == Priority.CRITICAL
    assert rec.due_date == now
    assert rec.title == "Electrical Safety Expired"
    assert rec.employee_id == "m-1"
    assert rec.department == "Maintenance"
    assert rec.recommended_training == ["Electrical Safety"]


def test_expiring_in_ten_days_is_high_and_due_on_expiry(now, make_member, make_certificate):
    member = make_member("m-1", "Ana")
    cert = make_certificate("c-1", member, expires_in_days=10)

    [rec] = CertificationLifecycleAnalyzer().analyze(RosterIndex([member], [cert]), now)

    assert rec.type == RecommendationType.CERTIFICATION_EXPIRING
    assert rec.priority == Priority.HIGH
    assert rec.due_date == cert.expiration_date
    assert rec.compliance_standards == ["29 CFR 1926.501"]
    assert (cert.expiration_date.strftime("%Y-%m-%d")) in rec.description


def test_unknown_holder_still_gets_renewal(now, make_member, make_certificate):
    stranger = make_member("m-9", "Zed")
    cert = make_certificate("c-1", stranger, expires_in_days=5)

    [rec] = CertificationLifecycleAnalyzer().analyze(RosterIndex([], [cert]), now)

    assert rec.employee_id is None
    assert rec.employee_name == "Zed Worker"
    assert rec.department is None


def test_revoked_certificate_is_never_active(now, make_member, make_certificate):
    cert = make_certificate("c-1", make_member("m-1", "Ana"), status=CertificateStatus.REVOKED)

    assert not is_active_certificate(cert, now)
    assert classify_certificate(cert, now) == LifecycleStatus.CURRENT


def test_expiring_and_overdue_helpers(now, make_member, make_certificate):
    member = make_member("m-1", "Ana")
    soon = make_certificate("c-soon", member, expires_in_days=20)
    later = make_certificate("c-later", member, expires_in_days=90)
    overdue = make_certificate("c-old", member, expires_in_days=-3)
    forever = make_certificate("c-forever", member, expires_in_days=None)
    certificates = [soon, later, overdue, forever]

    assert [c.id for c in get_expiring_certificates(certificates, 30, now)] == ["c-soon"]
    assert [c.id for c in get_expiring_certificates(certificates, 120, now)] == ["c-soon", "c-later"]
    assert [c.id for c in get_overdue_certificates(certificates, now + timedelta(days=25))] == ["c-soon", "c-old"]
