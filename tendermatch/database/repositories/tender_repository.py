from typing import Any

from psycopg.rows import dict_row

from tendermatch.database.connection import get_connection
from tendermatch.matching.base import BaseTenderSource
from tendermatch.matching.models import Tender
from tendermatch.processor.exceptions import NotFoundError

_TENDER_COLUMNS = """
    id, title, agency, description, category, location, value_min, value_max,
    deadline, status, source, external_id, bid_number
"""


def _row_to_tender(row: dict[str, Any]) -> Tender:
    return Tender(
        id=row["id"],
        title=row["title"],
        bid_number=row["bid_number"],
        source=row["source"],
        agency=row["agency"] or "",
        description=row["description"] or "",
        category=row["category"] or "",
        location=row["location"] or "",
        value_min=row["value_min"],
        value_max=row["value_max"],
        deadline=row["deadline"],
        status=row["status"],
        external_id=row["external_id"],
    )


class TenderRepository(BaseTenderSource):
    """Read-only access to the scraped tenders table."""

    def find_all(self) -> list[Tender]:
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(f"SELECT {_TENDER_COLUMNS} FROM tenders ORDER BY id")
                rows = cur.fetchall()
        return [_row_to_tender(r) for r in rows]

    def find_by_category(self, category: str) -> list[Tender]:
        """Tenders whose category equals the given one, ignoring case."""
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    f"""
                    SELECT {_TENDER_COLUMNS}
                    FROM tenders
                    WHERE lower(category) = lower(%s)
                    ORDER BY id
                    """,
                    (category.strip(),),
                )
                rows = cur.fetchall()
        return [_row_to_tender(r) for r in rows]

    def find_by_id(self, tender_id: int) -> Tender:
        """Find a tender by ID.

        Raises:
            NotFoundError: if no tender with this ID exists.
        """
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    f"SELECT {_TENDER_COLUMNS} FROM tenders WHERE id = %s",
                    (tender_id,),
                )
                row = cur.fetchone()

        if row is None:
            raise NotFoundError(f"Tender {tender_id} not found")
        return _row_to_tender(row)
