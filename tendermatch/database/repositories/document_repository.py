from typing import Any

from psycopg.rows import dict_row
from psycopg.types.json import Jsonb

from tendermatch.database.connection import get_connection, transaction
from tendermatch.database.models import DocumentRecord
from tendermatch.database.repositories.job_repository import JobRepository
from tendermatch.processor.exceptions import DocumentNotFoundError
from tendermatch.processor.models import Document, ProcessingJob


class DocumentRepository:
    """Database operations for the documents table."""

    def __init__(self, job_repo: JobRepository | None = None) -> None:
        self._job_repo = job_repo or JobRepository()

    def create_with_job(
        self,
        *,
        owner_id: int,
        storage_ref: str,
        file_name: str,
        mime_type: str,
        size_bytes: int,
        page_count: int,
        company_name: str | None = None,
    ) -> tuple[Document, ProcessingJob]:
        """Insert the document row and its 'uploading' job in one transaction."""
        with transaction() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    """
                    INSERT INTO documents
                    (owner_id, storage_ref, file_name, mime_type, size_bytes, page_count,
                     company_name)
                    VALUES (%s, %s, %s, %s, %s, %s, %s)
                    RETURNING id, uploaded_at
                    """,
                    (
                        owner_id,
                        storage_ref,
                        file_name,
                        mime_type,
                        size_bytes,
                        page_count,
                        company_name,
                    ),
                )
                row = cur.fetchone()
            assert row is not None
            job = self._job_repo.create(conn, row["id"])

        document = Document(
            id=row["id"],
            owner_id=owner_id,
            storage_ref=storage_ref,
            file_name=file_name,
            mime_type=mime_type,
            size_bytes=size_bytes,
            page_count=page_count,
            uploaded_at=row["uploaded_at"],
        )
        return document, job

    def find_by_id(self, document_id: int) -> DocumentRecord:
        """Find a document by ID, including its stage checkpoints.

        Raises:
            DocumentNotFoundError: if no document with this ID exists.
        """
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    """
                    SELECT id, owner_id, storage_ref, file_name, mime_type,
                           size_bytes, page_count, uploaded_at, company_name,
                           ocr_text, extracted_fields
                    FROM documents
                    WHERE id = %s
                    """,
                    (document_id,),
                )
                row = cur.fetchone()

        if row is None:
            raise DocumentNotFoundError(f"Document {document_id} not found")

        return DocumentRecord(
            id=row["id"],
            owner_id=row["owner_id"],
            storage_ref=row["storage_ref"],
            file_name=row["file_name"],
            mime_type=row["mime_type"],
            size_bytes=row["size_bytes"],
            page_count=row["page_count"],
            uploaded_at=row["uploaded_at"],
            company_name=row["company_name"],
            ocr_text=row["ocr_text"],
            extracted_fields=row["extracted_fields"],
        )

    def save_ocr_text(self, document_id: int, ocr_text: str) -> None:
        """Persist the OCR checkpoint. An existing checkpoint is kept.

        Raises:
            DocumentNotFoundError: if no document with this ID exists.
        """
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    UPDATE documents
                    SET ocr_text = COALESCE(ocr_text, %s)
                    WHERE id = %s
                    """,
                    (ocr_text, document_id),
                )
                if cur.rowcount == 0:
                    raise DocumentNotFoundError(f"Document {document_id} not found")
            conn.commit()

    def save_extracted_fields(self, document_id: int, extracted_fields: dict[str, Any]) -> None:
        """Persist the analysis checkpoint (fields and keywords). An existing checkpoint is kept.

        Raises:
            DocumentNotFoundError: if no document with this ID exists.
        """
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    UPDATE documents
                    SET extracted_fields = COALESCE(extracted_fields, %s)
                    WHERE id = %s
                    """,
                    (Jsonb(extracted_fields), document_id),
                )
                if cur.rowcount == 0:
                    raise DocumentNotFoundError(f"Document {document_id} not found")
            conn.commit()
