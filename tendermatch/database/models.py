from dataclasses import dataclass
from datetime import datetime
from typing import Any

from tendermatch.processor.models import Document, ExtractedFields


@dataclass
class DocumentRecord:
    """Represents a row from the documents table, including stage checkpoints."""

    id: int
    owner_id: int
    storage_ref: str
    file_name: str
    mime_type: str
    size_bytes: int
    page_count: int
    uploaded_at: datetime | None = None
    company_name: str | None = None
    ocr_text: str | None = None
    extracted_fields: dict[str, Any] | None = None

    def to_document(self) -> Document:
        return Document(
            id=self.id,
            owner_id=self.owner_id,
            storage_ref=self.storage_ref,
            file_name=self.file_name,
            mime_type=self.mime_type,
            size_bytes=self.size_bytes,
            page_count=self.page_count,
            uploaded_at=self.uploaded_at,
        )

    def extracted(self) -> ExtractedFields | None:
        if self.extracted_fields is None:
            return None
        return ExtractedFields.from_dict(self.extracted_fields)


@dataclass(frozen=True)
class StageClaim:
    """Outcome of trying to claim the current stage of a job.

    acquired: this caller now owns the stage.
    reclaimed: the stage had a previous claim that went stale.
    """

    acquired: bool
    reclaimed: bool = False
