"""Regression tests for database initialisation behaviour."""
from __future__ import annotations

import sqlite3

import pytest

from database.init_db import get_db_connection, init_database


EXPECTED_TABLES = {"workforce_members", "certificates", "training_sessions", "processed_documents"}


def test_init_database_preserves_existing_data(tmp_path, monkeypatch):
    db_path = tmp_path / "existing.db"
    db_url = f"sqlite:///{db_path}"
    monkeypatch.setenv("DATABASE_URL", db_url)

    conn = init_database(db_url, skip_if_exists=False)
    conn.close()

    with get_db_connection(db_url) as conn:
        conn.execute(
            "INSERT INTO workforce_members (id, organization_id, first_name, department) VALUES (?, ?, ?, ?)",
            ("m-1", "org-acme", "Ana", "Construction"),
        )
        conn.commit()

    init_database(db_url, skip_if_exists=True).close()

    with get_db_connection(db_url) as conn:
        cursor = conn.execute("SELECT COUNT(*) FROM workforce_members WHERE id = ?", ("m-1",))
        assert cursor.fetchone()[0] == 1


def test_init_database_supports_memory_sqlite(monkeypatch):
    db_url = "sqlite:///:memory:"
    monkeypatch.setenv("DATABASE_URL", db_url)

    conn = init_database(db_url, skip_if_exists=False)
    try:
        cursor = conn.execute("SELECT name FROM sqlite_master WHERE type='table'")
        tables = {row[0] for row in cursor.fetchall()}
        assert EXPECTED_TABLES <= tables
    finally:
        conn.close()


def test_schema_rejects_unknown_status(tmp_path):
    db_url = f"sqlite:///{tmp_path / 'status.db'}"
    conn = init_database(db_url, skip_if_exists=False)
    try:
        with pytest.raises(sqlite3.IntegrityError):
            conn.execute(
                "INSERT INTO workforce_members (id, organization_id, first_name, department, employment_status)"
                " VALUES (?, ?, ?, ?, ?)",
                ("m-1", "org-acme", "Ana", "Construction", "retired"),
            )
    finally:
        conn.close()


def test_non_sqlite_backends_are_rejected():
    with pytest.raises(RuntimeError):
        get_db_connection("postgresql://localhost/compliance")
