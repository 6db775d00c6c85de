"""
Customer Service.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from modules.backend.models.customer import Contact, Customer
from modules.backend.repositories.customer import ContactRepository, CustomerRepository
from modules.backend.schemas.customer import ContactCreate, CustomerCreate, CustomerUpdate
from modules.backend.services.base import BaseService


class CustomerService(BaseService):
    """Service for customers and their contacts."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)
        self.repo = CustomerRepository(session)
        self.contacts = ContactRepository(session)

    async def list_customers(
        self,
        search: str | None = None,
        limit: int = 20,
        offset: int = 0,
    ) -> tuple[list[Customer], int]:
        return await self.repo.search(search=search, limit=limit, offset=offset)

    async def get_customer(self, customer_id: str) -> Customer:
        return await self.repo.get_by_id(customer_id)

    async def create_customer(self, data: CustomerCreate) -> Customer:
        self._log_operation("Creating customer", name=data.name)
        return await self._execute_db_operation(
            "create_customer",
            self.repo.create(**data.model_dump()),
        )

    async def update_customer(self, customer_id: str, data: CustomerUpdate) -> Customer:
        update_data = self._changes(data)
        if not update_data:
            return await self.repo.get_by_id(customer_id)

        self._log_operation(
            "Updating customer",
            customer_id=customer_id,
            fields=list(update_data.keys()),
        )
        return await self._execute_db_operation(
            "update_customer",
            self.repo.update(customer_id, **update_data),
        )

    async def delete_customer(self, customer_id: str) -> None:
        self._log_operation("Deleting customer", customer_id=customer_id)
        await self._execute_db_operation("delete_customer", self.repo.delete(customer_id))

    async def list_contacts(self, customer_id: str) -> list[Contact]:
        await self.repo.get_by_id(customer_id)
        return await self.contacts.list_for_customer(customer_id)

    async def create_contact(self, customer_id: str, data: ContactCreate) -> Contact:
        """
        Add a contact to a customer.

        Raises:
            NotFoundError: If the customer does not exist
        """
        await self.repo.get_by_id(customer_id)
        self._log_operation("Creating contact", customer_id=customer_id)
        return await self._execute_db_operation(
            "create_contact",
            self.contacts.create(customer_id=customer_id, **data.model_dump()),
        )
