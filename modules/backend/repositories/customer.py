"""
Customer Repository.

Data access for customers and their contacts.
"""

from sqlalchemy import or_, select

from modules.backend.models.customer import Contact, Customer
from modules.backend.repositories.base import BaseRepository, contains


class CustomerRepository(BaseRepository[Customer]):
    """Repository for Customer model."""

    model = Customer

    async def search(
        self,
        search: str | None = None,
        limit: int = 20,
        offset: int = 0,
    ) -> tuple[list[Customer], int]:
        """Search customers by name, tax id, email or city."""
        query = select(Customer)
        if search:
            query = query.where(
                or_(
                    contains(Customer.name, search),
                    contains(Customer.afm, search),
                    contains(Customer.email, search),
                    contains(Customer.city, search),
                )
            )
        query = query.order_by(Customer.name.asc())
        return await self._fetch_page(query, limit, offset)


class ContactRepository(BaseRepository[Contact]):
    """Repository for Contact model."""

    model = Contact

    async def list_for_customer(self, customer_id: str) -> list[Contact]:
        result = await self.session.execute(
            select(Contact)
            .where(Contact.customer_id == customer_id)
            .order_by(Contact.name.asc())
        )
        return list(result.scalars().all())
