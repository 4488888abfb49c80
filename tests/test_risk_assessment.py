from engines.findings import CostImpact, Priority, RecommendationType
from engines.risk_assessment import RiskAssessmentEngine
from engines.roster import RosterIndex


def _crew(make_member, department, count):
    return [make_member(f"{department}-{i}", f"Crew{i}", department=department) for i in range(count)]


def test_uncertified_department_scores_coverage_only(now, make_member):
    members = _crew(make_member, "Bravo", 5)

    profile = RiskAssessmentEngine().assess_department("Bravo", members, RosterIndex(members, []), now)

    assert profile.risk_score == 0.3
    assert profile.issues == ["low certification coverage"]
    assert profile.expiring_ratio == 0.0


def test_all_factors_cap_at_one_and_are_critical(now, make_member, make_certificate):
    members = _crew(make_member, "Alpha", 5)
    # one stale certificate expiring soon: coverage 20%, expiring 100%, no recent activity
    certs = [make_certificate("c-1", members[0], expires_in_days=20, issued_days_ago=400)]
    roster = RosterIndex(members, certs)

    engine = RiskAssessmentEngine()
    profile = engine.assess_departments(roster, now)["Alpha"]
    [rec] = engine.analyze(roster, now)

    assert profile.risk_score == 1.0
    assert profile.issues == [
        "low certification coverage",
        "multiple expiring certificates",
        "no recent training activity",
    ]
    assert rec.id == "dept-risk-alpha"
    assert rec.type == RecommendationType.RISK_MITIGATION
    assert rec.priority == Priority.CRITICAL
    assert rec.risk_level == Priority.CRITICAL
    assert rec.cost_impact == CostImpact.HIGH
    assert rec.description == (
        "Alpha shows elevated compliance risk with low certification coverage, "
        "multiple expiring certificates, no recent training activity"
    )


def test_score_of_exactly_threshold_emits_nothing(now, make_member, make_certificate):
    members = _crew(make_member, "Alpha", 5)
    # coverage 0.3 + staleness 0.4, expirations far out
    certs = [make_certificate("c-1", members[0], expires_in_days=300, issued_days_ago=200)]
    roster = RosterIndex(members, certs)

    engine = RiskAssessmentEngine()

    assert engine.assess_departments(roster, now)["Alpha"].risk_score == 0.7
    assert engine.analyze(roster, now) == []


def test_expiring_and_stale_without_coverage_gap_stays_below_threshold(now, make_member, make_certificate):
    members = _crew(make_member, "Alpha", 2)
    certs = [
        make_certificate("c-1", members[0], expires_in_days=45, issued_days_ago=120),
        make_certificate("c-2", members[1], expires_in_days=400, issued_days_ago=120),
    ]
    roster = RosterIndex(members, certs)

    engine = RiskAssessmentEngine()
    profile = engine.assess_departments(roster, now)["Alpha"]

    assert profile.expiring_ratio == 0.5
    assert profile.risk_score == 0.7
    assert profile.recommended_training == ["Renewal training program", "Refresher training sessions"]
    assert engine.analyze(roster, now) == []


def test_recent_certificate_clears_staleness(now, make_member, make_certificate):
    members = _crew(make_member, "Alpha", 1)
    certs = [
        make_certificate("c-1", members[0], issued_days_ago=200),
        make_certificate("c-2", members[0], issued_days_ago=10, certification_type="Scaffold Safety"),
    ]

    profile = RiskAssessmentEngine().assess_departments(RosterIndex(members, certs), now)["Alpha"]

    assert profile.recent_certificate_count == 1
    assert profile.risk_score == 0.0


def test_similarly_named_departments_get_distinct_ids(now, make_member, make_certificate):
    members = []
    certs = []
    for department in ("Sales Ops", "Sales-Ops", "Yard"):
        crew = _crew(make_member, department, 5)
        members += crew
        certs.append(make_certificate(f"c-{department}", crew[0], expires_in_days=20, issued_days_ago=400))

    recs = RiskAssessmentEngine().analyze(RosterIndex(members, certs), now)

    ids = [r.id for r in recs]
    assert len(ids) == 3
    assert len(set(ids)) == 3
    assert "dept-risk-yard" in ids
    assert [r.department for r in recs] == ["Sales Ops", "Sales-Ops", "Yard"]
