"""
Integration Tests for the Leads API.
"""

from httpx import AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from modules.backend.models.customer import Customer
from modules.backend.models.site_survey import SiteSurvey


async def _customer(db_session: AsyncSession) -> Customer:
    customer = Customer(name="Olympus Bank")
    db_session.add(customer)
    await db_session.flush()
    return customer


async def _create_lead(client: AsyncClient, headers: dict, api, **values) -> dict:
    response = await client.post(
        "/api/v1/leads",
        json={"title": values.pop("title", "Branch network upgrade"), **values},
        headers=headers,
    )
    return api.assert_success(response, expected_status=201)["data"]


class TestCreateLead:
    """Tests for POST /api/v1/leads."""

    async def test_numbers_leads_sequentially(self, client: AsyncClient, staff_headers, api):
        first = await _create_lead(client, staff_headers, api, title="First")
        second = await _create_lead(client, staff_headers, api, title="Second")

        assert first["lead_number"] == "LL001"
        assert second["lead_number"] == "LL002"

    async def test_defaults(self, client: AsyncClient, staff_headers, employee_user, api):
        lead = await _create_lead(client, staff_headers, api)

        assert lead["stage"] == "LEAD_NEW"
        assert lead["status"] == "ACTIVE"
        assert lead["priority"] == "MEDIUM"
        assert lead["owner_id"] == employee_user.id

    async def test_creation_recorded_in_history(self, client: AsyncClient, staff_headers, api):
        lead = await _create_lead(client, staff_headers, api)

        response = await client.get(f"/api/v1/leads/{lead['id']}/status-changes", headers=staff_headers)

        changes = api.assert_success(response)["data"]
        assert len(changes) == 1
        assert changes[0]["from_stage"] is None
        assert changes[0]["to_stage"] == "LEAD_NEW"

    async def test_requested_survey_is_created(
        self,
        client: AsyncClient,
        db_session,
        staff_headers,
        admin_user,
        dispatched,
        api,
    ):
        customer = await _customer(db_session)

        lead = await _create_lead(
            client,
            staff_headers,
            api,
            title="ATM cabling",
            customer_id=customer.id,
            assignee_id=admin_user.id,
            requested_site_survey=True,
        )

        surveys = (
            await db_session.execute(select(SiteSurvey).where(SiteSurvey.lead_id == lead["id"]))
        ).scalars().all()
        assert [s.title for s in surveys] == ["Site Survey - ATM cabling"]
        assert surveys[0].assign_to_id == admin_user.id

        task_names = [call.args[0] for call in dispatched.await_args_list]
        assert task_names == ["lead_created", "site_survey_assigned"]

    async def test_requested_survey_needs_customer(
        self,
        client: AsyncClient,
        db_session,
        staff_headers,
        dispatched,
        api,
    ):
        lead = await _create_lead(client, staff_headers, api, requested_site_survey=True)

        surveys = (
            await db_session.execute(select(SiteSurvey).where(SiteSurvey.lead_id == lead["id"]))
        ).scalars().all()
        assert surveys == []
        assert [call.args[0] for call in dispatched.await_args_list] == ["lead_created"]

    async def test_unknown_customer(self, client: AsyncClient, staff_headers, api):
        response = await client.post(
            "/api/v1/leads",
            json={"title": "Ghost", "customer_id": "missing"},
            headers=staff_headers,
        )

        api.assert_error(response, 404)

    async def test_probability_out_of_range(self, client: AsyncClient, staff_headers, api):
        response = await client.post(
            "/api/v1/leads",
            json={"title": "Too sure", "probability": 120},
            headers=staff_headers,
        )

        api.assert_validation_error(response, field="probability")


class TestLeadStatus:
    """Tests for POST /api/v1/leads/{id}/status."""

    async def test_change_records_history(self, client: AsyncClient, staff_headers, employee_user, api):
        lead = await _create_lead(client, staff_headers, api)

        response = await client.post(
            f"/api/v1/leads/{lead['id']}/status",
            json={"to_stage": "LEAD_QUALIFIED", "note": "Budget approved"},
            headers=staff_headers,
        )
        assert api.assert_success(response)["data"]["stage"] == "LEAD_QUALIFIED"

        history = await client.get(f"/api/v1/leads/{lead['id']}/status-changes", headers=staff_headers)
        changes = api.assert_success(history)["data"]
        assert [(c["from_stage"], c["to_stage"]) for c in changes] == [
            (None, "LEAD_NEW"),
            ("LEAD_NEW", "LEAD_QUALIFIED"),
        ]
        assert changes[1]["note"] == "Budget approved"
        assert changes[1]["changed_by"]["id"] == employee_user.id

    async def test_same_stage_is_not_recorded(self, client: AsyncClient, staff_headers, api):
        lead = await _create_lead(client, staff_headers, api)

        await client.post(
            f"/api/v1/leads/{lead['id']}/status",
            json={"to_stage": "LEAD_NEW"},
            headers=staff_headers,
        )

        history = await client.get(f"/api/v1/leads/{lead['id']}/status-changes", headers=staff_headers)
        assert len(api.assert_success(history)["data"]) == 1

    async def test_unknown_stage(self, client: AsyncClient, staff_headers, api):
        lead = await _create_lead(client, staff_headers, api)

        response = await client.post(
            f"/api/v1/leads/{lead['id']}/status",
            json={"to_stage": "WON"},
            headers=staff_headers,
        )

        api.assert_validation_error(response, field="to_stage")


class TestListAndUpdateLeads:
    """Tests for GET /api/v1/leads and PATCH /api/v1/leads/{id}."""

    async def test_filter_by_priority_and_search(self, client: AsyncClient, staff_headers, user_headers, api):
        await _create_lead(client, staff_headers, api, title="Data center", priority="HIGH")
        await _create_lead(client, staff_headers, api, title="Small office", priority="LOW")

        by_priority = await client.get("/api/v1/leads", params={"priority": "HIGH"}, headers=user_headers)
        assert [lead["title"] for lead in api.assert_success(by_priority)["data"]] == ["Data center"]

        by_number = await client.get("/api/v1/leads", params={"search": "LL002"}, headers=user_headers)
        assert [lead["title"] for lead in api.assert_success(by_number)["data"]] == ["Small office"]

    async def test_search_wildcards_match_literally(self, client: AsyncClient, staff_headers, user_headers, api):
        await _create_lead(client, staff_headers, api, title="100% uptime link")
        await _create_lead(client, staff_headers, api, title="100 Mbps link")

        response = await client.get("/api/v1/leads", params={"search": "100%"}, headers=user_headers)

        assert [lead["title"] for lead in api.assert_success(response)["data"]] == ["100% uptime link"]

    async def test_update_does_not_touch_stage(self, client: AsyncClient, staff_headers, api):
        lead = await _create_lead(client, staff_headers, api)

        response = await client.patch(
            f"/api/v1/leads/{lead['id']}",
            json={"status": "FROZEN", "estimated_value": 12500.5},
            headers=staff_headers,
        )

        data = api.assert_success(response)["data"]
        assert data["status"] == "FROZEN"
        assert data["estimated_value"] == 12500.5
        assert data["stage"] == "LEAD_NEW"

    async def test_delete_keeps_survey(
        self,
        client: AsyncClient,
        db_session,
        staff_headers,
        api,
    ):
        customer = await _customer(db_session)
        lead = await _create_lead(
            client,
            staff_headers,
            api,
            customer_id=customer.id,
            requested_site_survey=True,
        )

        response = await client.delete(f"/api/v1/leads/{lead['id']}", headers=staff_headers)
        assert response.status_code == 204

        db_session.expunge_all()
        surveys = (
            await db_session.execute(select(SiteSurvey).where(SiteSurvey.customer_id == customer.id))
        ).scalars().all()
        assert len(surveys) == 1
        assert surveys[0].lead_id is None
