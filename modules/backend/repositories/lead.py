"""
Lead Repository.

Data access for leads and their stage-change audit trail.
"""

from sqlalchemy import or_, select

from modules.backend.models.lead import Lead, LeadStatusChange
from modules.backend.repositories.base import BaseRepository, contains


class LeadRepository(BaseRepository[Lead]):
    """Repository for Lead model."""

    model = Lead

    async def get_latest_lead_number(self) -> str | None:
        """
        Get the lead number of the most recently created lead.

        Returns:
            Lead number such as "LL007", or None when no leads exist
        """
        result = await self.session.execute(
            select(Lead.lead_number)
            .order_by(Lead.created_at.desc(), Lead.lead_number.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def list_filtered(
        self,
        search: str | None = None,
        stage: str | None = None,
        status: str | None = None,
        priority: str | None = None,
        assignee_id: str | None = None,
        owner_id: str | None = None,
        customer_id: str | None = None,
        limit: int = 20,
        offset: int = 0,
    ) -> tuple[list[Lead], int]:
        """
        List leads, newest first.

        Returns:
            Tuple of (leads, total count)
        """
        query = select(Lead)
        if search:
            query = query.where(
                or_(
                    contains(Lead.title, search),
                    contains(Lead.description, search),
                    contains(Lead.lead_number, search),
                )
            )
        if stage:
            query = query.where(Lead.stage == stage)
        if status:
            query = query.where(Lead.status == status)
        if priority:
            query = query.where(Lead.priority == priority)
        if assignee_id:
            query = query.where(Lead.assignee_id == assignee_id)
        if owner_id:
            query = query.where(Lead.owner_id == owner_id)
        if customer_id:
            query = query.where(Lead.customer_id == customer_id)

        query = query.order_by(Lead.created_at.desc())
        return await self._fetch_page(query, limit, offset)


class LeadStatusChangeRepository(BaseRepository[LeadStatusChange]):
    """Repository for LeadStatusChange model."""

    model = LeadStatusChange

    async def list_for_lead(self, lead_id: str) -> list[LeadStatusChange]:
        result = await self.session.execute(
            select(LeadStatusChange)
            .where(LeadStatusChange.lead_id == lead_id)
            .order_by(LeadStatusChange.created_at.asc())
        )
        return list(result.scalars().all())
