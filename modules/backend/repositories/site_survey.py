"""
Site Survey Repository.
"""

from sqlalchemy import or_, select

from modules.backend.models.customer import Customer
from modules.backend.models.site_survey import SiteSurvey
from modules.backend.repositories.base import BaseRepository, contains


class SiteSurveyRepository(BaseRepository[SiteSurvey]):
    """Repository for SiteSurvey model."""

    model = SiteSurvey

    async def list_filtered(
        self,
        search: str | None = None,
        survey_type: str | None = None,
        status: str | None = None,
        customer_id: str | None = None,
        assigned_to: str | None = None,
        limit: int = 20,
        offset: int = 0,
    ) -> tuple[list[SiteSurvey], int]:
        """
        List site surveys, newest first.

        Search matches title, description, address, city, phone, email and
        the customer name, case-insensitively.

        Returns:
            Tuple of (surveys, total count)
        """
        query = select(SiteSurvey).join(Customer, Customer.id == SiteSurvey.customer_id)
        if search:
            query = query.where(
                or_(
                    contains(SiteSurvey.title, search),
                    contains(SiteSurvey.description, search),
                    contains(SiteSurvey.address, search),
                    contains(SiteSurvey.city, search),
                    contains(SiteSurvey.phone, search),
                    contains(SiteSurvey.email, search),
                    contains(Customer.name, search),
                )
            )
        if survey_type:
            query = query.where(SiteSurvey.type == survey_type)
        if status:
            query = query.where(SiteSurvey.status == status)
        if customer_id:
            query = query.where(SiteSurvey.customer_id == customer_id)
        if assigned_to:
            query = query.where(SiteSurvey.assign_to_id == assigned_to)

        query = query.order_by(SiteSurvey.created_at.desc())
        return await self._fetch_page(query, limit, offset)

    async def list_for_lead(self, lead_id: str) -> list[SiteSurvey]:
        result = await self.session.execute(
            select(SiteSurvey)
            .where(SiteSurvey.lead_id == lead_id)
            .order_by(SiteSurvey.created_at.desc())
        )
        return list(result.scalars().all())
