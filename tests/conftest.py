"""Shared pytest fixtures for the compliance engine tests."""
from __future__ import annotations

import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Callable, Dict

import pytest

_PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(_PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(_PROJECT_ROOT))

from core.config import get_config
from database.records import Certificate, ProcessedDocument, WorkforceMember
from engines.catalog import RequirementCatalog


ORG_ID = "org-acme"

_ENGINE_ENV_VARS = (
    "DATABASE_URL",
    "COMPLIANCE_ENGINE_DB_PATH",
    "REQUIREMENT_CATALOG_PATH",
    "FETCH_MAX_WORKERS",
    "NARRATIVE_ENABLED",
    "NARRATIVE_API_URL",
    "NARRATIVE_API_KEY",
    "NARRATIVE_MODEL",
    "NARRATIVE_TIMEOUT_SECONDS",
    "NARRATIVE_MAX_TOKENS",
)


@pytest.fixture(autouse=True)
def _isolated_config(monkeypatch):
    """Reload configuration from a clean environment for each test."""

    for name in _ENGINE_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    get_config.cache_clear()
    yield
    get_config.cache_clear()


@pytest.fixture()
def now() -> datetime:
    return datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture()
def make_member() -> Callable[..., WorkforceMember]:
    def _make(member_id: str, first_name: str, last_name: str = "Worker",
              department: str = "Construction", **overrides: Any) -> WorkforceMember:
        data: Dict[str, Any] = {
            "id": member_id,
            "organization_id": ORG_ID,
            "first_name": first_name,
            "last_name": last_name,
            "department": department,
        }
        data.update(overrides)
        return WorkforceMember(**data)

    return _make


@pytest.fixture()
def make_certificate(now: datetime) -> Callable[..., Certificate]:
    def _make(cert_id: str, holder: WorkforceMember, certification_type: str = "Fall Protection",
              expires_in_days: float | None = 365, issued_days_ago: float = 30,
              **overrides: Any) -> Certificate:
        data: Dict[str, Any] = {
            "id": cert_id,
            "organization_id": ORG_ID,
            "holder_name": holder.full_name,
            "holder_id": holder.id,
            "certification_type": certification_type,
            "issue_date": now - timedelta(days=issued_days_ago),
            "expiration_date": None if expires_in_days is None else now + timedelta(days=expires_in_days),
            "standards": ["29 CFR 1926.501"],
        }
        data.update(overrides)
        return Certificate(**data)

    return _make


@pytest.fixture()
def make_document(now: datetime) -> Callable[..., ProcessedDocument]:
    counter = {"next": 0}

    def _make(training_type: str | None, days_ago: float = 5) -> ProcessedDocument:
        counter["next"] += 1
        return ProcessedDocument(
            id=f"doc-{counter['next']}",
            organization_id=ORG_ID,
            processed_at=now - timedelta(days=days_ago),
            training_type=training_type,
        )

    return _make


@pytest.fixture()
def fall_protection_catalog() -> RequirementCatalog:
    """Both test departments require Fall Protection and nothing else."""

    entry = {
        "name": "Fall Protection",
        "criticality": "critical",
        "duration": "8 hours",
        "standards": ["29 CFR 1926.501"],
        "gracePeriod": 30,
    }
    return RequirementCatalog.from_table("test-1", {"Alpha": [dict(entry)], "Bravo": [dict(entry)]})
