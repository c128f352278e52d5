from datetime import datetime, timezone
from typing import Any

import psycopg
from psycopg.rows import dict_row
from psycopg.types.json import Jsonb

from tendermatch.database.connection import get_connection, transaction
from tendermatch.processor.exceptions import ProfileApplyError, ProfileNotFoundError
from tendermatch.processor.models import CompanyProfile, ExtractedFields, KeywordPair
from tendermatch.profile.completeness import apply_extracted_fields, rescore

_PROFILE_COLUMNS = """
    user_id, company_description, business_type, company_activities,
    main_industries, specializations, keywords, document_processed,
    completeness_score, updated_at
"""


def _row_to_profile(row: dict[str, Any]) -> CompanyProfile:
    return CompanyProfile(
        user_id=row["user_id"],
        company_description=row["company_description"] or "",
        business_type=row["business_type"] or "",
        company_activities=list(row["company_activities"] or []),
        main_industries=list(row["main_industries"] or []),
        specializations=list(row["specializations"] or []),
        keywords=[
            KeywordPair(source=k.get("source", ""), target=k.get("target", ""))
            for k in row["keywords"] or []
        ],
        document_processed=bool(row["document_processed"]),
        completeness_score=row["completeness_score"],
        updated_at=row["updated_at"],
    )


class ProfileRepository:
    """Database operations for the company_profiles table.

    Writes are serialized per user: the row is locked FOR UPDATE, and a
    transaction-scoped advisory lock on the user id covers the first insert.
    """

    def find_by_user_id(self, user_id: int) -> CompanyProfile:
        """Read a profile.

        Raises:
            ProfileNotFoundError: if the user has no profile.
        """
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    f"SELECT {_PROFILE_COLUMNS} FROM company_profiles WHERE user_id = %s",
                    (user_id,),
                )
                row = cur.fetchone()

        if row is None:
            raise ProfileNotFoundError(f"Profile for user {user_id} not found")
        return _row_to_profile(row)

    def apply_extraction(self, user_id: int, fields: ExtractedFields) -> CompanyProfile:
        """Merge extracted fields into the user's profile atomically.

        Either every field lands in one commit or nothing changes.

        Raises:
            ProfileApplyError: on any persistence failure.
        """
        try:
            with transaction() as conn:
                current = self._lock_for_update(conn, user_id)
                merged = apply_extracted_fields(
                    current, fields, now=datetime.now(timezone.utc)
                )
                return self._upsert(conn, merged)
        except psycopg.Error as exc:
            raise ProfileApplyError(
                f"Failed to apply extracted fields to profile {user_id}: {exc}"
            ) from exc

    def save(self, profile: CompanyProfile) -> CompanyProfile:
        """Write a whole profile (explicit edits, seeding). The score is recomputed."""
        with transaction() as conn:
            self._lock_for_update(conn, profile.user_id)
            return self._upsert(conn, rescore(profile))

    def _lock_for_update(
        self, conn: psycopg.Connection[Any], user_id: int
    ) -> CompanyProfile:
        conn.execute("SELECT pg_advisory_xact_lock(%s)", (user_id,))
        with conn.cursor(row_factory=dict_row) as cur:
            cur.execute(
                f"""
                SELECT {_PROFILE_COLUMNS}
                FROM company_profiles
                WHERE user_id = %s
                FOR UPDATE
                """,
                (user_id,),
            )
            row = cur.fetchone()
        if row is None:
            return CompanyProfile(user_id=user_id)
        return _row_to_profile(row)

    def _upsert(
        self, conn: psycopg.Connection[Any], profile: CompanyProfile
    ) -> CompanyProfile:
        with conn.cursor(row_factory=dict_row) as cur:
            cur.execute(
                f"""
                INSERT INTO company_profiles
                (user_id, company_description, business_type, company_activities,
                 main_industries, specializations, keywords, document_processed,
                 completeness_score, updated_at)
                VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, NOW())
                ON CONFLICT (user_id) DO UPDATE SET
                    company_description = EXCLUDED.company_description,
                    business_type = EXCLUDED.business_type,
                    company_activities = EXCLUDED.company_activities,
                    main_industries = EXCLUDED.main_industries,
                    specializations = EXCLUDED.specializations,
                    keywords = EXCLUDED.keywords,
                    document_processed = EXCLUDED.document_processed,
                    completeness_score = EXCLUDED.completeness_score,
                    updated_at = NOW()
                RETURNING {_PROFILE_COLUMNS}
                """,
                (
                    profile.user_id,
                    profile.company_description,
                    profile.business_type,
                    Jsonb(profile.company_activities),
                    Jsonb(profile.main_industries),
                    Jsonb(profile.specializations),
                    Jsonb([k.to_dict() for k in profile.keywords]),
                    profile.document_processed,
                    profile.completeness_score,
                ),
            )
            row = cur.fetchone()
        assert row is not None
        return _row_to_profile(row)
