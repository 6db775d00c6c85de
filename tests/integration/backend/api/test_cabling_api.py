"""
Integration Tests for the Cabling API.
"""

from httpx import AsyncClient
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from modules.backend.models.cabling import (
    Building,
    CablingSurvey,
    Device,
    Floor,
    FloorRack,
    ImageAsset,
    Room,
)
from modules.backend.models.customer import Customer
from modules.backend.models.site_survey import SiteSurvey

TREE = {
    "buildings": [
        {
            "name": "Main",
            "code": "B1",
            "images": ["https://cdn.test/b1.webp"],
            "centralRack": {
                "name": "MDF",
                "units": 42,
                "cableTerminations": [{"type": "CAT6", "count": 48}],
                "fiberTerminations": [{"type": "OM3", "totalStrands": 12, "terminatedStrands": 8}],
                "devices": [
                    {"type": "SWITCH", "brand": "Cisco", "model": "C9300", "ipAddress": "10.0.0.2"},
                    {"type": "PBX", "name": "Phones", "phoneNumber": "2101234567"},
                ],
            },
            "floors": [
                {
                    "name": "Ground",
                    "level": 0,
                    "floorRacks": [{"name": "IDF-0", "units": 12}],
                    "rooms": [{"name": "Reception", "outlets": 4}],
                },
            ],
        },
        {"name": "Annex"},
    ],
    "buildingConnections": [
        {"fromBuilding": 0, "toBuilding": 1, "connectionType": "FIBER", "distance": 120.5},
    ],
}


async def _site_survey(db_session: AsyncSession) -> SiteSurvey:
    customer = Customer(name="Aegean Hotel")
    db_session.add(customer)
    await db_session.flush()
    survey = SiteSurvey(title="Cabling", type="CABLING", customer_id=customer.id)
    db_session.add(survey)
    await db_session.flush()
    return survey


async def _count(db_session: AsyncSession, model) -> int:
    return (await db_session.execute(select(func.count()).select_from(model))).scalar_one()


class TestSaveCabling:
    """Tests for PUT /api/v1/cabling/site-surveys/{id}."""

    async def test_save_returns_tree(self, client: AsyncClient, db_session, staff_headers, api):
        survey = await _site_survey(db_session)

        response = await client.put(
            f"/api/v1/cabling/site-surveys/{survey.id}",
            json=TREE,
            headers=staff_headers,
        )

        data = api.assert_success(response)["data"]
        assert data["siteSurveyId"] == survey.id
        assert data["cablingSurveyId"]
        assert [b["name"] for b in data["buildings"]] == ["Main", "Annex"]
        rack = data["buildings"][0]["centralRack"]
        assert rack["fiberTerminations"][0]["terminatedStrands"] == 8
        assert data["buildingConnections"][0]["distance"] == 120.5

    async def test_rows_are_normalized(self, client: AsyncClient, db_session, staff_headers, api):
        survey = await _site_survey(db_session)

        response = await client.put(
            f"/api/v1/cabling/site-surveys/{survey.id}",
            json=TREE,
            headers=staff_headers,
        )
        api.assert_success(response)

        assert await _count(db_session, Building) == 2
        assert await _count(db_session, Floor) == 1
        assert await _count(db_session, Room) == 1
        assert await _count(db_session, Device) == 2
        assert await _count(db_session, ImageAsset) == 1

        pbx = (
            await db_session.execute(select(Device).where(Device.type == "PBX"))
        ).scalar_one()
        assert pbx.notes == "Phone: 2101234567"

    async def test_saving_twice_upserts(self, client: AsyncClient, db_session, staff_headers, api):
        survey = await _site_survey(db_session)

        for _ in range(2):
            response = await client.put(
                f"/api/v1/cabling/site-surveys/{survey.id}",
                json=TREE,
                headers=staff_headers,
            )
            api.assert_success(response)

        assert await _count(db_session, Building) == 2
        assert await _count(db_session, Floor) == 1
        assert await _count(db_session, Device) == 2

    async def test_resave_replaces_children(self, client: AsyncClient, db_session, staff_headers, api):
        survey = await _site_survey(db_session)
        url = f"/api/v1/cabling/site-surveys/{survey.id}"

        def tree(images: list[str], racks: list[dict] | None, room_number: str) -> dict:
            floor = {"name": "Ground", "rooms": [{"name": "Reception", "number": room_number}]}
            if racks is not None:
                floor["floorRacks"] = racks
            return {"buildings": [{"name": "Main", "images": images, "floors": [floor]}]}

        first = tree(
            ["https://cdn.test/a.webp", "https://cdn.test/b.webp"],
            [
                {
                    "name": "IDF-1",
                    "images": ["https://cdn.test/idf1.webp"],
                    "devices": [{"type": "SWITCH", "model": "C9200"}],
                },
                {"name": "IDF-2"},
            ],
            "1",
        )
        api.assert_success(await client.put(url, json=first, headers=staff_headers))
        assert await _count(db_session, FloorRack) == 2
        assert await _count(db_session, Device) == 1
        assert await _count(db_session, ImageAsset) == 3

        second = tree(["https://cdn.test/c.webp"], [{"name": "IDF-3"}], "2")
        api.assert_success(await client.put(url, json=second, headers=staff_headers))

        image_urls = (await db_session.execute(select(ImageAsset.url))).scalars().all()
        rack_names = (await db_session.execute(select(FloorRack.name))).scalars().all()
        room_numbers = (await db_session.execute(select(Room.number))).scalars().all()
        assert image_urls == ["https://cdn.test/c.webp"]
        assert rack_names == ["IDF-3"]
        assert room_numbers == ["2"]
        assert await _count(db_session, Device) == 0

        third = tree([], None, "2")
        api.assert_success(await client.put(url, json=third, headers=staff_headers))

        image_urls = (await db_session.execute(select(ImageAsset.url))).scalars().all()
        rack_names = (await db_session.execute(select(FloorRack.name))).scalars().all()
        assert image_urls == ["https://cdn.test/c.webp"]
        assert rack_names == ["IDF-3"]
        assert await _count(db_session, Room) == 1

    async def test_no_connections_stored_as_null(self, client: AsyncClient, db_session, staff_headers, api):
        survey = await _site_survey(db_session)

        response = await client.put(
            f"/api/v1/cabling/site-surveys/{survey.id}",
            json={"buildings": [{"name": "Main"}]},
            headers=staff_headers,
        )
        api.assert_success(response)

        stored = (
            await db_session.execute(
                select(CablingSurvey.building_connections).where(CablingSurvey.site_survey_id == survey.id)
            )
        ).scalar_one()
        assert stored is None

    async def test_unknown_site_survey(self, client: AsyncClient, staff_headers, api):
        response = await client.put(
            "/api/v1/cabling/site-surveys/missing",
            json=TREE,
            headers=staff_headers,
        )

        api.assert_error(response, 404)

    async def test_building_without_name_fails_validation(
        self,
        client: AsyncClient,
        db_session,
        staff_headers,
        api,
    ):
        survey = await _site_survey(db_session)

        response = await client.put(
            f"/api/v1/cabling/site-surveys/{survey.id}",
            json={"buildings": [{"code": "B1"}]},
            headers=staff_headers,
        )

        api.assert_validation_error(response)


class TestLoadCabling:
    """Tests for GET /api/v1/cabling/site-surveys/{id}."""

    async def test_load_after_save(self, client: AsyncClient, db_session, staff_headers, user_headers, api):
        survey = await _site_survey(db_session)
        await client.put(
            f"/api/v1/cabling/site-surveys/{survey.id}",
            json=TREE,
            headers=staff_headers,
        )

        response = await client.get(f"/api/v1/cabling/site-surveys/{survey.id}", headers=user_headers)

        data = api.assert_success(response)["data"]
        assert data["buildings"][0]["floors"][0]["rooms"][0]["name"] == "Reception"
        assert data["buildings"][0]["centralRack"]["devices"][0]["ipAddress"] == "10.0.0.2"

    async def test_nothing_saved_yet(self, client: AsyncClient, db_session, user_headers, api):
        survey = await _site_survey(db_session)

        response = await client.get(f"/api/v1/cabling/site-surveys/{survey.id}", headers=user_headers)

        api.assert_error(response, 404)
