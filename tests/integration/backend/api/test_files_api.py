"""
Integration Tests for the Files API.

Storage is the in-memory fake from the integration conftest.
"""

import io

from httpx import AsyncClient
from PIL import Image

from modules.backend.core.exceptions import ExternalServiceError


def _png(width: int, height: int) -> bytes:
    output = io.BytesIO()
    Image.new("RGB", (width, height), color=(200, 30, 30)).save(output, format="PNG")
    return output.getvalue()


async def _upload(client: AsyncClient, headers: dict, files: list, **form) -> object:
    data = {"entity_id": "survey-1", "entity_type": "SITESURVEY", "folder": "info@acme.gr", **form}
    return await client.post("/api/v1/files/upload", files=files, data=data, headers=headers)


class TestUploadFiles:
    """Tests for POST /api/v1/files/upload."""

    async def test_upload_records_and_stores(self, client: AsyncClient, storage, user_headers, api):
        response = await _upload(
            client,
            user_headers,
            [
                ("files", ("offer v1.pdf", b"%PDF-1.4", "application/pdf")),
                ("files", ("notes.txt", b"hello", "text/plain")),
            ],
            title="Offer",
        )

        data = api.assert_success(response, expected_status=201)["data"]
        assert data["errors"] == []
        assert [f["name"] for f in data["files"]] == ["offer v1.pdf", "notes.txt"]
        assert data["files"][0]["title"] == "Offer"
        assert data["files"][0]["size"] == 8

        paths = list(storage.objects)
        assert all(path.startswith("sitesurveys/info_at_acme.gr/") for path in paths)
        assert paths[0].endswith("_offer_v1.pdf")
        assert data["files"][0]["url"] == f"https://cdn.test/{paths[0]}"

    async def test_listed_by_entity(self, client: AsyncClient, user_headers, api):
        await _upload(client, user_headers, [("files", ("a.txt", b"a", "text/plain"))])
        await _upload(
            client,
            user_headers,
            [("files", ("b.txt", b"b", "text/plain"))],
            entity_id="customer-1",
            entity_type="CUSTOMER",
        )

        response = await client.get(
            "/api/v1/files",
            params={"entity_id": "survey-1", "type": "SITESURVEY"},
            headers=user_headers,
        )

        assert [f["name"] for f in api.assert_success(response)["data"]] == ["a.txt"]

    async def test_failed_file_reported_others_kept(
        self,
        client: AsyncClient,
        storage,
        user_headers,
        api,
    ):
        original_put = storage.put

        async def flaky_put(path, data, content_type="application/octet-stream"):
            if path.endswith("broken.txt"):
                raise ExternalServiceError("Storage unavailable", service="bunny")
            return await original_put(path, data, content_type)

        storage.put = flaky_put

        response = await _upload(
            client,
            user_headers,
            [
                ("files", ("broken.txt", b"x", "text/plain")),
                ("files", ("fine.txt", b"y", "text/plain")),
            ],
        )

        data = api.assert_success(response, expected_status=201)["data"]
        assert [f["name"] for f in data["files"]] == ["fine.txt"]
        assert data["errors"] == [{"name": "broken.txt", "error": "Storage unavailable"}]

    async def test_unknown_entity_type(self, client: AsyncClient, user_headers, api):
        response = await _upload(
            client,
            user_headers,
            [("files", ("a.txt", b"a", "text/plain"))],
            entity_type="PLANET",
        )

        api.assert_error(response, 400, "VAL_VALIDATION_ERROR")


class TestCablingImage:
    """Tests for POST /api/v1/files/cabling-image."""

    async def test_image_converted_to_webp(self, client: AsyncClient, storage, staff_headers, api):
        response = await client.post(
            "/api/v1/files/cabling-image",
            files={"file": ("rack.png", _png(2560, 1280), "image/png")},
            data={"entityType": "central_rack", "entityId": "rack-1"},
            headers=staff_headers,
        )

        data = api.assert_success(response, expected_status=201)["data"]
        assert data["content_type"] == "image/webp"
        assert (data["width"], data["height"]) == (1280, 640)
        assert data["filename"].startswith("cabling/central_rack/rack-1/")
        assert data["filename"].endswith(".webp")

        stored, content_type = storage.objects[data["filename"]]
        assert content_type == "image/webp"
        assert stored[:4] == b"RIFF"

    async def test_pdf_stored_unchanged(self, client: AsyncClient, storage, staff_headers, api):
        response = await client.post(
            "/api/v1/files/cabling-image",
            files={"file": ("plan.pdf", b"%PDF-1.7 plan", "application/pdf")},
            data={"entityType": "floor", "entityId": "floor-1"},
            headers=staff_headers,
        )

        data = api.assert_success(response, expected_status=201)["data"]
        assert data["content_type"] == "application/pdf"
        assert storage.objects[data["filename"]][0] == b"%PDF-1.7 plan"

    async def test_other_types_rejected(self, client: AsyncClient, staff_headers, api):
        response = await client.post(
            "/api/v1/files/cabling-image",
            files={"file": ("notes.txt", b"hello", "text/plain")},
            data={"entityType": "room", "entityId": "room-1"},
            headers=staff_headers,
        )

        api.assert_error(response, 400)

    async def test_corrupt_image_rejected(self, client: AsyncClient, staff_headers, api):
        response = await client.post(
            "/api/v1/files/cabling-image",
            files={"file": ("rack.png", b"not really a png", "image/png")},
            data={"entityType": "room", "entityId": "room-1"},
            headers=staff_headers,
        )

        api.assert_error(response, 400)


class TestDeleteFile:
    """Tests for DELETE /api/v1/files/{id}."""

    async def test_delete_removes_object_and_record(
        self,
        client: AsyncClient,
        storage,
        staff_headers,
        api,
    ):
        uploaded = await _upload(client, staff_headers, [("files", ("a.txt", b"a", "text/plain"))])
        record = api.assert_success(uploaded, expected_status=201)["data"]["files"][0]

        response = await client.delete(f"/api/v1/files/{record['id']}", headers=staff_headers)
        assert response.status_code == 204

        assert storage.objects == {}
        assert len(storage.deleted) == 1

        listed = await client.get("/api/v1/files", params={"entity_id": "survey-1"}, headers=staff_headers)
        assert api.assert_success(listed)["data"] == []

    async def test_unknown_file(self, client: AsyncClient, staff_headers, api):
        response = await client.delete("/api/v1/files/missing", headers=staff_headers)

        api.assert_error(response, 404)
