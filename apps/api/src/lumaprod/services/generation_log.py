"""
Generation log: the audit trail of generation attempts.

Rows are only ever inserted, given a provider job id once, and settled
once. Settling is a compare-and-set on ``status = 'started'`` so that any
number of concurrent settlers (webhook deliveries, the reconciliation
sweep) produce exactly one terminal write.
"""

from datetime import datetime

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from lumaprod.models import GenerationLogEntry, GenerationStatus
from lumaprod.models.enums import GenerationField


class GenerationLog:
    """Queries and writes for GenerationLogEntry rows. Callers commit."""

    def __init__(self, db: Session) -> None:
        self._db = db

    def start(
        self,
        content_item_id: int,
        field: GenerationField | str,
        translation_code: str | None = None,
    ) -> GenerationLogEntry:
        """Insert a ``started`` row for a new attempt."""
        entry = GenerationLogEntry(
            content_item_id=content_item_id,
            field=GenerationField(field).value,
            translation_code=translation_code,
            status=GenerationStatus.STARTED,
        )
        self._db.add(entry)
        self._db.flush()
        return entry

    def attach_job_id(self, entry: GenerationLogEntry, job_id: str) -> None:
        """Store the provider job id on the attempt that requested it."""
        entry.heygen_video_id = job_id
        self._db.flush()

    def settle(
        self,
        entry_id: int,
        status: GenerationStatus,
        error_message: str | None = None,
        duration_ms: int | None = None,
    ) -> bool:
        """
        Move an attempt from ``started`` to a terminal status.

        Returns:
            True if this call wrote the terminal status, False if the row
            had already been settled by someone else
        """
        if not status.is_terminal:
            raise ValueError("settle() requires a terminal status")

        result = self._db.execute(
            update(GenerationLogEntry)
            .where(
                GenerationLogEntry.id == entry_id,
                GenerationLogEntry.status == GenerationStatus.STARTED,
            )
            .values(status=status, error_message=error_message, duration_ms=duration_ms)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    def find_by_job_id(self, job_id: str) -> GenerationLogEntry | None:
        return self._db.execute(
            select(GenerationLogEntry).where(GenerationLogEntry.heygen_video_id == job_id)
        ).scalar_one_or_none()

    def pending_for(
        self,
        content_item_id: int,
        field: GenerationField | str,
        newer_than: datetime,
    ) -> GenerationLogEntry | None:
        """Most recent ``started`` attempt for an item/field that is not stale yet."""
        return self._db.execute(
            select(GenerationLogEntry)
            .where(
                GenerationLogEntry.content_item_id == content_item_id,
                GenerationLogEntry.field == GenerationField(field).value,
                GenerationLogEntry.status == GenerationStatus.STARTED,
                GenerationLogEntry.created_at >= newer_than,
            )
            .order_by(GenerationLogEntry.id.desc())
            .limit(1)
        ).scalar_one_or_none()

    def stale_started(self, older_than: datetime) -> list[GenerationLogEntry]:
        """``started`` attempts created before ``older_than``, oldest first."""
        return list(
            self._db.execute(
                select(GenerationLogEntry)
                .where(
                    GenerationLogEntry.status == GenerationStatus.STARTED,
                    GenerationLogEntry.created_at < older_than,
                )
                .order_by(GenerationLogEntry.created_at, GenerationLogEntry.id)
            ).scalars().all()
        )

    def pending_jobs(self) -> list[GenerationLogEntry]:
        """``started`` attempts that are waiting on the provider."""
        return list(
            self._db.execute(
                select(GenerationLogEntry)
                .where(
                    GenerationLogEntry.status == GenerationStatus.STARTED,
                    GenerationLogEntry.heygen_video_id.is_not(None),
                )
                .order_by(GenerationLogEntry.created_at, GenerationLogEntry.id)
            ).scalars().all()
        )

    def attempt_count(self, content_item_id: int, field: GenerationField | str) -> int:
        return self._db.execute(
            select(func.count(GenerationLogEntry.id)).where(
                GenerationLogEntry.content_item_id == content_item_id,
                GenerationLogEntry.field == GenerationField(field).value,
            )
        ).scalar_one()

    def list_for_item(self, content_item_id: int) -> list[GenerationLogEntry]:
        return list(
            self._db.execute(
                select(GenerationLogEntry)
                .where(GenerationLogEntry.content_item_id == content_item_id)
                .order_by(GenerationLogEntry.created_at.desc(), GenerationLogEntry.id.desc())
            ).scalars().all()
        )
