import os
import random
import uuid
from collections.abc import Generator
from pathlib import Path
from typing import Any

import psycopg
import pytest

from tendermatch.config.settings import Settings
from tendermatch.database.connection import (
    apply_schema,
    close_pool,
    get_connection,
    init_pool,
)
from tendermatch.processor.models import JobState


def _test_settings() -> Settings:
    os.environ.setdefault("DB_DATABASE", "tendermatch_test")
    return Settings()


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    return _test_settings()


@pytest.fixture(scope="session")
def integration_pool(test_settings: Settings) -> Generator[None, None, None]:
    try:
        init_pool(test_settings)
        apply_schema()
    except Exception as e:
        close_pool()
        pytest.skip(
            f"PostgreSQL test DB not available: {e}. "
            "Set DB_* env to point at a disposable database"
        )
    try:
        yield
    finally:
        close_pool()


@pytest.fixture
def db_conn(integration_pool: None) -> Generator[psycopg.Connection[Any], None, None]:
    with get_connection() as conn:
        yield conn


@pytest.fixture
def integration_cleanup(
    integration_pool: None,
) -> Generator[list[tuple[str, int]], None, None]:
    cleanup: list[tuple[str, int]] = []
    yield cleanup
    if not cleanup:
        return
    with get_connection() as conn:
        with conn.cursor() as cur:
            for table, row_id in cleanup:
                if table == "documents":
                    cur.execute("DELETE FROM processing_jobs WHERE document_id = %s", (row_id,))
                    cur.execute("DELETE FROM documents WHERE id = %s", (row_id,))
            for table, row_id in cleanup:
                if table == "company_profiles":
                    cur.execute("DELETE FROM company_profiles WHERE user_id = %s", (row_id,))
                if table == "tenders":
                    cur.execute("DELETE FROM tenders WHERE id = %s", (row_id,))
        conn.commit()


@pytest.fixture
def owner_id(integration_cleanup: list[tuple[str, int]]) -> int:
    """A user id no other test run is likely to share. Its profile is removed afterwards."""
    user_id = random.randint(10**9, 2 * 10**9)
    integration_cleanup.append(("company_profiles", user_id))
    return user_id


@pytest.fixture
def files_root(tmp_path: Path) -> Path:
    return tmp_path


@pytest.fixture
def seed_document(
    db_conn: psycopg.Connection[Any],
    integration_cleanup: list[tuple[str, int]],
    owner_id: int,
    files_root: Path,
    company_pdf_bytes: bytes,
) -> tuple[int, str]:
    """A stored document with its blob on disk and no job yet."""
    storage_ref = f"{owner_id}/{uuid.uuid4()}.pdf"
    path = files_root / storage_ref
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(company_pdf_bytes)
    with db_conn.cursor() as cur:
        cur.execute(
            """
            INSERT INTO documents
            (owner_id, storage_ref, file_name, mime_type, size_bytes, page_count)
            VALUES (%s, %s, %s, %s, %s, %s)
            RETURNING id
            """,
            (owner_id, storage_ref, "profile.pdf", "application/pdf", len(company_pdf_bytes), 2),
        )
        row = cur.fetchone()
        assert row is not None
        document_id = row[0]
    db_conn.commit()
    integration_cleanup.append(("documents", document_id))
    return (document_id, storage_ref)


@pytest.fixture
def seed_job(
    db_conn: psycopg.Connection[Any],
    seed_document: tuple[int, str],
) -> int:
    """A triggered job, ready for the worker."""
    with db_conn.cursor() as cur:
        cur.execute(
            """
            INSERT INTO processing_jobs (document_id, state)
            VALUES (%s, %s)
            RETURNING id
            """,
            (seed_document[0], JobState.PROCESSING.value),
        )
        row = cur.fetchone()
        assert row is not None
        job_id = row[0]
    db_conn.commit()
    return int(job_id)


@pytest.fixture
def seed_tenders(
    db_conn: psycopg.Connection[Any],
    integration_cleanup: list[tuple[str, int]],
) -> list[int]:
    category = f"Integration {uuid.uuid4().hex[:8]}"
    rows = [
        ("Cloud hosting services", category, "2030-01-01T00:00:00+00:00"),
        ("Office furniture supply", category, None),
        ("Bridge construction", "Construction", None),
    ]
    ids: list[int] = []
    with db_conn.cursor() as cur:
        for title, tender_category, deadline in rows:
            cur.execute(
                """
                INSERT INTO tenders (title, category, deadline, source, bid_number)
                VALUES (%s, %s, %s, %s, %s)
                RETURNING id
                """,
                (title, tender_category, deadline, "integration", uuid.uuid4().hex),
            )
            row = cur.fetchone()
            assert row is not None
            ids.append(int(row[0]))
    db_conn.commit()
    for tender_id in ids:
        integration_cleanup.append(("tenders", tender_id))
    return ids


@pytest.fixture
def tender_category(db_conn: psycopg.Connection[Any], seed_tenders: list[int]) -> str:
    with db_conn.cursor() as cur:
        cur.execute("SELECT category FROM tenders WHERE id = %s", (seed_tenders[0],))
        row = cur.fetchone()
    assert row is not None
    return str(row[0])
