"""
Integration Tests for the Customers API.

Also covers the page-based pagination envelope shared by list endpoints.
"""

from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from modules.backend.models.customer import Customer


async def _customers(db_session: AsyncSession, *names: str) -> list[Customer]:
    customers = [Customer(name=name, city="Athens") for name in names]
    db_session.add_all(customers)
    await db_session.flush()
    return customers


class TestCreateCustomer:
    """Tests for POST /api/v1/customers."""

    async def test_create_customer(self, client: AsyncClient, staff_headers, api):
        response = await client.post(
            "/api/v1/customers",
            json={"name": "ACME S.A.", "afm": "099999999", "email": "info@acme.gr"},
            headers=staff_headers,
        )

        data = api.assert_success(response, expected_status=201)
        assert data["data"]["name"] == "ACME S.A."
        assert data["data"]["afm"] == "099999999"
        assert data["data"]["id"]

    async def test_plain_user_cannot_create(self, client: AsyncClient, user_headers, api):
        response = await client.post(
            "/api/v1/customers",
            json={"name": "ACME"},
            headers=user_headers,
        )

        api.assert_error(response, 403)

    async def test_empty_name_fails_validation(self, client: AsyncClient, staff_headers, api):
        response = await client.post(
            "/api/v1/customers",
            json={"name": ""},
            headers=staff_headers,
        )

        api.assert_validation_error(response, field="name")

    async def test_invalid_email_fails_validation(self, client: AsyncClient, staff_headers, api):
        response = await client.post(
            "/api/v1/customers",
            json={"name": "ACME", "email": "not-an-email"},
            headers=staff_headers,
        )

        api.assert_validation_error(response, field="email")


class TestListCustomers:
    """Tests for GET /api/v1/customers."""

    async def test_sorted_by_name(self, client: AsyncClient, db_session, user_headers, api):
        await _customers(db_session, "Zeta", "Alpha", "Mu")

        response = await client.get("/api/v1/customers", headers=user_headers)

        data = api.assert_success(response)
        assert [c["name"] for c in data["data"]] == ["Alpha", "Mu", "Zeta"]

    async def test_search(self, client: AsyncClient, db_session, user_headers, api):
        await _customers(db_session, "Aegean Hotel", "Olympus Bank")

        response = await client.get(
            "/api/v1/customers",
            params={"search": "hotel"},
            headers=user_headers,
        )

        data = api.assert_success(response)
        assert [c["name"] for c in data["data"]] == ["Aegean Hotel"]
        assert data["pagination"]["total"] == 1

    async def test_second_page(self, client: AsyncClient, db_session, user_headers, api):
        await _customers(db_session, "A", "B", "C", "D", "E")

        response = await client.get(
            "/api/v1/customers",
            params={"page": 2, "limit": 2},
            headers=user_headers,
        )

        data = api.assert_success(response)
        assert [c["name"] for c in data["data"]] == ["C", "D"]
        assert data["pagination"] == {
            "total": 5,
            "limit": 2,
            "page": 2,
            "pages": 3,
            "has_more": True,
        }

    async def test_last_page_has_no_more(self, client: AsyncClient, db_session, user_headers, api):
        await _customers(db_session, "A", "B", "C")

        response = await client.get(
            "/api/v1/customers",
            params={"page": 2, "limit": 2},
            headers=user_headers,
        )

        data = api.assert_success(response)
        assert [c["name"] for c in data["data"]] == ["C"]
        assert data["pagination"]["has_more"] is False

    async def test_page_zero_is_invalid(self, client: AsyncClient, user_headers, api):
        response = await client.get(
            "/api/v1/customers",
            params={"page": 0},
            headers=user_headers,
        )

        api.assert_validation_error(response, field="page")

    async def test_limit_above_maximum_is_invalid(self, client: AsyncClient, user_headers, api):
        response = await client.get(
            "/api/v1/customers",
            params={"limit": 101},
            headers=user_headers,
        )

        api.assert_validation_error(response, field="limit")


class TestUpdateAndDeleteCustomer:
    """Tests for PATCH and DELETE /api/v1/customers/{id}."""

    async def test_partial_update_keeps_other_fields(
        self,
        client: AsyncClient,
        db_session,
        staff_headers,
        api,
    ):
        (customer,) = await _customers(db_session, "ACME")

        response = await client.patch(
            f"/api/v1/customers/{customer.id}",
            json={"phone": "2101234567"},
            headers=staff_headers,
        )

        data = api.assert_success(response)
        assert data["data"]["phone"] == "2101234567"
        assert data["data"]["city"] == "Athens"

    async def test_delete_customer(self, client: AsyncClient, db_session, staff_headers, api):
        (customer,) = await _customers(db_session, "ACME")

        response = await client.delete(f"/api/v1/customers/{customer.id}", headers=staff_headers)
        assert response.status_code == 204

        missing = await client.get(f"/api/v1/customers/{customer.id}", headers=staff_headers)
        api.assert_error(missing, 404, "RES_NOT_FOUND")


class TestContacts:
    """Tests for /api/v1/customers/{id}/contacts."""

    async def test_add_and_list_contacts(self, client: AsyncClient, db_session, staff_headers, api):
        (customer,) = await _customers(db_session, "ACME")

        for name in ("Nikos", "Eleni"):
            created = await client.post(
                f"/api/v1/customers/{customer.id}/contacts",
                json={"name": name, "mobile_phone": "6900000000"},
                headers=staff_headers,
            )
            assert api.assert_success(created, expected_status=201)["data"]["customer_id"] == customer.id

        response = await client.get(f"/api/v1/customers/{customer.id}/contacts", headers=staff_headers)

        data = api.assert_success(response)
        assert [c["name"] for c in data["data"]] == ["Eleni", "Nikos"]

    async def test_contact_for_unknown_customer(self, client: AsyncClient, staff_headers, api):
        response = await client.post(
            "/api/v1/customers/missing/contacts",
            json={"name": "Nikos"},
            headers=staff_headers,
        )

        api.assert_error(response, 404)
