"""
Integration Tests for the Documents API.
"""

import io

from httpx import AsyncClient
from openpyxl import load_workbook
from sqlalchemy.ext.asyncio import AsyncSession

from modules.backend.models.catalog import Brand, Product
from modules.backend.models.customer import Customer
from modules.backend.models.lead import Lead
from modules.backend.models.site_survey import SiteSurvey


async def _products(db_session: AsyncSession) -> tuple[Product, Product]:
    cisco = Brand(name="Cisco")
    ubiquiti = Brand(name="Ubiquiti")
    db_session.add_all([cisco, ubiquiti])
    await db_session.flush()
    switch = Product(name="Catalyst 9200", code="C9200", code1="5200000000001", brand_id=cisco.id)
    access_point = Product(name="U6 Lite", code="U6L", brand_id=ubiquiti.id)
    db_session.add_all([switch, access_point])
    await db_session.flush()
    return switch, access_point


async def _survey(db_session: AsyncSession, with_lead: bool = True, **values) -> SiteSurvey:
    customer = Customer(name="Aegean Hotel")
    db_session.add(customer)
    await db_session.flush()

    lead_id = None
    if with_lead:
        lead = Lead(lead_number="LL007", title="Hotel network", customer_id=customer.id)
        db_session.add(lead)
        await db_session.flush()
        lead_id = lead.id

    survey = SiteSurvey(title="Hotel cabling", customer_id=customer.id, lead_id=lead_id, **values)
    db_session.add(survey)
    await db_session.flush()
    await db_session.refresh(survey)
    return survey


def _equipment(switch: Product, access_point: Product) -> list[dict]:
    return [
        {
            "name": "Main",
            "centralRack": {
                "switches": [{"productId": switch.id, "quantity": 2}],
            },
            "floors": [
                {
                    "name": "Ground",
                    "rooms": [
                        {
                            "name": "Lobby",
                            "devices": [{"products": [{"productId": access_point.id, "quantity": 3}]}],
                        },
                    ],
                },
            ],
        },
    ]


class TestDownloadBom:
    """Tests for GET /api/v1/documents/site-surveys/{id}/bom.xlsx."""

    async def test_download(self, client: AsyncClient, db_session, user_headers):
        switch, access_point = await _products(db_session)
        survey = await _survey(db_session, infrastructure_data=_equipment(switch, access_point))

        response = await client.get(
            f"/api/v1/documents/site-surveys/{survey.id}/bom.xlsx",
            headers=user_headers,
        )

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("application/vnd.openxmlformats")
        assert response.headers["content-disposition"] == "attachment; filename*=UTF-8''LL007%20-%20BOM.xlsx"

        workbook = load_workbook(io.BytesIO(response.content))
        assert workbook.sheetnames == ["SUMMARY", "CISCO", "UBIQUITI"]
        assert workbook["SUMMARY"]["B3"].value == "LL007"

    async def test_without_buildings(self, client: AsyncClient, db_session, user_headers, api):
        survey = await _survey(db_session)

        response = await client.get(
            f"/api/v1/documents/site-surveys/{survey.id}/bom.xlsx",
            headers=user_headers,
        )

        api.assert_error(response, 400, "VAL_VALIDATION_ERROR")

    async def test_without_products(self, client: AsyncClient, db_session, user_headers, api):
        survey = await _survey(db_session, infrastructure_data=[{"name": "Main", "floors": []}])

        response = await client.get(
            f"/api/v1/documents/site-surveys/{survey.id}/bom.xlsx",
            headers=user_headers,
        )

        api.assert_error(response, 400)

    async def test_unknown_survey(self, client: AsyncClient, user_headers, api):
        response = await client.get(
            "/api/v1/documents/site-surveys/missing/bom.xlsx",
            headers=user_headers,
        )

        api.assert_error(response, 404)


class TestGenerateBom:
    """Tests for POST /api/v1/documents/site-surveys/{id}/bom."""

    async def test_stored_under_lead_with_versions(
        self,
        client: AsyncClient,
        db_session,
        storage,
        staff_headers,
        api,
    ):
        switch, access_point = await _products(db_session)
        survey = await _survey(db_session, infrastructure_data=_equipment(switch, access_point))

        first = await client.post(f"/api/v1/documents/site-surveys/{survey.id}/bom", headers=staff_headers)
        second = await client.post(f"/api/v1/documents/site-surveys/{survey.id}/bom", headers=staff_headers)

        first_data = api.assert_success(first, expected_status=201)["data"]
        second_data = api.assert_success(second, expected_status=201)["data"]

        assert first_data["linked_to"] == "LEAD"
        assert first_data["product_count"] == 2
        assert first_data["total_quantity"] == 5
        assert [first_data["version"], second_data["version"]] == [1, 2]
        assert second_data["file"]["name"] == "LL007 - BOM - v2.xlsx"
        assert second_data["file"]["entity_id"] == survey.lead_id
        assert second_data["file"]["title"] == "BOM v2"

        assert len(storage.objects) == 2
        assert all(path.startswith(f"leads/{survey.lead_id}/bom/") for path in storage.objects)

    async def test_stored_under_customer_without_lead(
        self,
        client: AsyncClient,
        db_session,
        staff_headers,
        api,
    ):
        switch, access_point = await _products(db_session)
        survey = await _survey(
            db_session,
            with_lead=False,
            infrastructure_data=_equipment(switch, access_point),
        )

        response = await client.post(f"/api/v1/documents/site-surveys/{survey.id}/bom", headers=staff_headers)

        data = api.assert_success(response, expected_status=201)["data"]
        assert data["linked_to"] == "CUSTOMER"
        assert data["file"]["entity_id"] == survey.customer_id
        assert data["file"]["name"] == "Aegean_Hotel - BOM - v1.xlsx"

    async def test_plain_user_is_forbidden(self, client: AsyncClient, db_session, user_headers, api):
        survey = await _survey(db_session)

        response = await client.post(f"/api/v1/documents/site-surveys/{survey.id}/bom", headers=user_headers)

        api.assert_error(response, 403)


class TestReports:
    """Tests for the cabling and site survey report downloads."""

    async def test_cabling_workbook(self, client: AsyncClient, db_session, user_headers):
        survey = await _survey(db_session, infrastructure_data=[{"name": "Main", "floors": []}])

        response = await client.get(
            f"/api/v1/documents/site-surveys/{survey.id}/cabling.xlsx",
            headers=user_headers,
        )

        assert response.status_code == 200
        assert response.content[:2] == b"PK"
        assert "Hotel_cabling%20-%20Cabling%20Survey.xlsx" in response.headers["content-disposition"]

    async def test_site_survey_document(self, client: AsyncClient, db_session, user_headers):
        survey = await _survey(db_session, description="Two buildings, one fiber link")

        response = await client.get(
            f"/api/v1/documents/site-surveys/{survey.id}/report.docx",
            headers=user_headers,
        )

        assert response.status_code == 200
        assert response.headers["content-type"].startswith(
            "application/vnd.openxmlformats-officedocument.wordprocessingml"
        )
        assert response.content[:2] == b"PK"
