"""Repository for Report model operations."""

from typing import Any, Optional

from sqlalchemy import delete, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

from loss_reports.models.report import Report
from loss_reports.utils.logger import get_logger

log = get_logger(__name__)

# Fields a caller may overwrite after creation.
MUTABLE_FIELDS = ("manager", "restaurant", "reason", "amount", "start", "end", "comment")


class ReportRepository:
    """Repository for Report CRUD operations."""

    def __init__(self, session: AsyncSession):
        self.session = session

    def _dialect_insert(self):
        """Pick the dialect-specific insert construct that supports ON CONFLICT."""
        bind = self.session.bind
        dialect_name = bind.dialect.name if bind is not None else "sqlite"
        if dialect_name == "postgresql":
            return postgresql.insert
        return sqlite.insert

    async def get_by_id(self, report_id: int) -> Optional[Report]:
        """Get report by surrogate ID."""
        result = await self.session.execute(select(Report).where(Report.id == report_id))
        return result.scalar_one_or_none()

    async def get_by_identity(self, request_identity: str) -> Optional[Report]:
        """Get report by its request identity."""
        result = await self.session.execute(
            select(Report).where(Report.request_identity == request_identity)
        )
        return result.scalar_one_or_none()

    async def list_all(self) -> list[Report]:
        """All reports, newest first."""
        result = await self.session.execute(
            select(Report).order_by(Report.created_at.desc(), Report.id.desc())
        )
        return list(result.scalars().all())

    async def insert_if_absent(self, values: dict[str, Any]) -> tuple[Report, bool]:
        """
        Insert a report unless one with the same request identity exists.

        Relies on a single ``INSERT .. ON CONFLICT DO NOTHING .. RETURNING``
        so two racing callers cannot both insert. The insert is committed
        before returning.

        Args:
            values: Column values including ``request_identity`` and ``created_at``

        Returns:
            Tuple of (stored report, True if this call inserted it)
        """
        identity = values["request_identity"]
        insert = self._dialect_insert()
        stmt = (
            insert(Report)
            .values(**values)
            .on_conflict_do_nothing(index_elements=["request_identity"])
            .returning(Report.id)
        )

        # A conflicting row can vanish (concurrent delete) before we read it back.
        for _ in range(2):
            result = await self.session.execute(stmt)
            inserted_id = result.scalar_one_or_none()
            await self.session.commit()

            if inserted_id is not None:
                report = await self.get_by_id(inserted_id)
                log.debug("report inserted", report_id=inserted_id, identity=identity)
                return report, True

            existing = await self.get_by_identity(identity)
            if existing is not None:
                log.debug("report identity exists", report_id=existing.id, identity=identity)
                return existing, False

        raise RuntimeError(f"report identity {identity} neither inserted nor found")

    async def update(self, report: Report, values: dict[str, Any]) -> Report:
        """Overwrite the mutable fields of a report in place."""
        for field in MUTABLE_FIELDS:
            setattr(report, field, values[field])
        await self.session.flush()
        await self.session.refresh(report)
        log.debug("report updated", report_id=report.id)
        return report

    async def delete_by_id(self, report_id: int) -> bool:
        """Delete a report by ID. Returns False if no row matched."""
        result = await self.session.execute(delete(Report).where(Report.id == report_id))
        await self.session.flush()
        return (result.rowcount or 0) > 0
