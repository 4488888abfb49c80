"""Read-only access to the record collections of one organization."""
from __future__ import annotations

import json
import sqlite3
from collections import defaultdict
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Dict, Iterable, List, Optional, Protocol, Sequence, TypeVar

from pydantic import ValidationError

from core.errors import RecordRetrievalError
from core.logging import get_logger
from database.init_db import get_readonly_connection
from database.records import (
    Certificate,
    OrganizationSnapshot,
    ProcessedDocument,
    TrainingSession,
    WorkforceMember,
)


logger = get_logger(__name__)

T = TypeVar("T")


class RecordRepository(Protocol):
    """Upstream collaborator contract: four independent, organization-scoped reads."""

    def fetch_members(self, organization_id: str) -> Sequence[WorkforceMember]: ...

    def fetch_certificates(self, organization_id: str) -> Sequence[Certificate]: ...

    def fetch_training_sessions(self, organization_id: str) -> Sequence[TrainingSession]: ...

    def fetch_processed_documents(self, organization_id: str) -> Sequence[ProcessedDocument]: ...


class InMemoryRecordRepository:
    """Repository over typed records held in memory."""

    def __init__(
        self,
        members: Iterable[WorkforceMember] = (),
        certificates: Iterable[Certificate] = (),
        training_sessions: Iterable[TrainingSession] = (),
        documents: Iterable[ProcessedDocument] = (),
    ) -> None:
        self._members = _group_by_organization(members)
        self._certificates = _group_by_organization(certificates)
        self._training_sessions = _group_by_organization(training_sessions)
        self._documents = _group_by_organization(documents)

    def fetch_members(self, organization_id: str) -> List[WorkforceMember]:
        return list(self._members.get(organization_id, ()))

    def fetch_certificates(self, organization_id: str) -> List[Certificate]:
        return list(self._certificates.get(organization_id, ()))

    def fetch_training_sessions(self, organization_id: str) -> List[TrainingSession]:
        return list(self._training_sessions.get(organization_id, ()))

    def fetch_processed_documents(self, organization_id: str) -> List[ProcessedDocument]:
        return list(self._documents.get(organization_id, ()))


class SqliteRecordRepository:
    """Repository over the reference SQLite schema.

    Each fetch opens its own read-only connection so the four reads can run
    on separate threads. A missing database file is an error, never created.
    """

    def __init__(self, database_url: Optional[str] = None) -> None:
        self.database_url = database_url

    def _query(self, sql: str, organization_id: str) -> List[sqlite3.Row]:
        conn = get_readonly_connection(self.database_url)
        try:
            return conn.execute(sql, (organization_id,)).fetchall()
        finally:
            conn.close()

    def fetch_members(self, organization_id: str) -> List[WorkforceMember]:
        rows = self._query(
            """
            SELECT id, organization_id, first_name, last_name, department,
                   employment_status, position
            FROM workforce_members
            WHERE organization_id = ?
            ORDER BY id
            """,
            organization_id,
        )
        return [WorkforceMember(**dict(row)) for row in rows]

    def fetch_certificates(self, organization_id: str) -> List[Certificate]:
        rows = self._query(
            """
            SELECT id, organization_id, holder_name, holder_id, certification_type,
                   issue_date, expiration_date, status, standards, created_at
            FROM certificates
            WHERE organization_id = ?
            ORDER BY created_at DESC, id
            """,
            organization_id,
        )
        certificates = []
        for row in rows:
            data = dict(row)
            data["standards"] = json.loads(data["standards"]) if data["standards"] else []
            certificates.append(Certificate(**data))
        return certificates

    def fetch_training_sessions(self, organization_id: str) -> List[TrainingSession]:
        rows = self._query(
            """
            SELECT id, organization_id, session_name, created_at
            FROM training_sessions
            WHERE organization_id = ?
            ORDER BY created_at DESC, id
            """,
            organization_id,
        )
        return [TrainingSession(**dict(row)) for row in rows]

    def fetch_processed_documents(self, organization_id: str) -> List[ProcessedDocument]:
        rows = self._query(
            """
            SELECT id, organization_id, processing_date, extracted_data
            FROM processed_documents
            WHERE organization_id = ?
            ORDER BY processing_date DESC, id
            """,
            organization_id,
        )
        return [
            ProcessedDocument.from_extraction(
                id=row["id"],
                organization_id=row["organization_id"],
                processed_at=row["processing_date"],
                extracted_data=_load_extracted_data(row["extracted_data"]),
            )
            for row in rows
        ]


def _load_extracted_data(raw: Optional[str]) -> Any:
    # Ingestion output is free-form; anything unparsable simply carries no training type
    if not raw:
        return None
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        return None


def _group_by_organization(records: Iterable[T]) -> Dict[str, List[T]]:
    grouped: Dict[str, List[T]] = defaultdict(list)
    for record in records:
        grouped[record.organization_id].append(record)  # type: ignore[attr-defined]
    return dict(grouped)


def fetch_snapshot(
    repository: RecordRepository,
    organization_id: str,
    *,
    max_workers: int = 4,
) -> OrganizationSnapshot:
    """Fetch all four collections concurrently and freeze them into one snapshot.

    Any failing fetch aborts the whole snapshot with ``RecordRetrievalError``.
    """

    fetchers: Dict[str, Callable[[str], Sequence[Any]]] = {
        "members": repository.fetch_members,
        "certificates": repository.fetch_certificates,
        "training_sessions": repository.fetch_training_sessions,
        "documents": repository.fetch_processed_documents,
    }

    with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="record-fetch") as executor:
        futures = {name: executor.submit(fetch, organization_id) for name, fetch in fetchers.items()}

        collections: Dict[str, List[Any]] = {}
        for name, future in futures.items():
            try:
                collections[name] = list(future.result() or ())
            except Exception as exc:
                logger.error(
                    "record_fetch_failed",
                    collection=name,
                    error=str(exc),
                    error_type=type(exc).__name__,
                )
                for pending in futures.values():
                    pending.cancel()
                raise RecordRetrievalError(
                    f"Failed to fetch {name} for organization {organization_id}: {exc}",
                    organization_id=organization_id,
                    collection=name,
                ) from exc

    try:
        snapshot = OrganizationSnapshot(organization_id=organization_id, **collections)
    except ValidationError as exc:
        raise RecordRetrievalError(
            f"Fetched records for organization {organization_id} failed validation",
            organization_id=organization_id,
        ) from exc

    logger.info(
        "snapshot_fetched",
        members=len(snapshot.members),
        certificates=len(snapshot.certificates),
        training_sessions=len(snapshot.training_sessions),
        documents=len(snapshot.documents),
    )
    return snapshot


__all__ = [
    "RecordRepository",
    "InMemoryRecordRepository",
    "SqliteRecordRepository",
    "fetch_snapshot",
]
