"""Media library — uploads, metadata, serving and deletion."""

from __future__ import annotations

import os

import pytest

from tripgo.common.constants import MediaCategory
from tripgo.common.exceptions import BadRequestException
from tripgo.config import settings
from tripgo.media import service as media_service
from tripgo.media.service import category_for

PNG = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32


@pytest.fixture(autouse=True)
def upload_dir(tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "UPLOAD_DIR", str(tmp_path))
    return tmp_path


async def _upload(client, headers, name="deck.png", content=PNG, mime="image/png", **form):
    return await client.post(
        "/api/v1/media/upload",
        files={"file": (name, content, mime)},
        data=form,
        headers=headers,
    )


def _stored_files(root) -> list[str]:
    return [os.path.join(d, f) for d, _, files in os.walk(root) for f in files]


def test_category_for():
    assert category_for("image/png") == MediaCategory.image
    assert category_for("IMAGE/X-ICON") == MediaCategory.image
    assert category_for("application/pdf") == MediaCategory.document
    assert category_for("application/x-thing") == MediaCategory.other


class TestUpload:

    async def test_upload_stores_file_and_metadata(self, client, tenant, admin_headers, upload_dir):
        resp = await _upload(
            client, admin_headers, folder=" fleet ", title="Pool deck", tags="ship, deck,,",
        )
        assert resp.status_code == 201, resp.text
        media = resp.json()["data"]
        assert media["original_name"] == "deck.png"
        assert media["category"] == "image"
        assert media["size"] == len(PNG)
        assert media["folder"] == "fleet"
        assert media["tags"] == ["ship", "deck"]
        assert media["filename"].endswith(".png")
        assert media["filename"] != "deck.png"
        assert media["url"] == f"/api/v1/media/file/{media['id']}"

        stored = _stored_files(upload_dir)
        assert len(stored) == 1
        assert os.path.join(str(tenant.id), "image", media["filename"]) in stored[0]

    async def test_serve_file_is_public(self, client, admin_headers):
        media = (await _upload(client, admin_headers)).json()["data"]
        resp = await client.get(media["url"])
        assert resp.status_code == 200
        assert resp.content == PNG
        assert resp.headers["content-type"] == "image/png"

    async def test_rejects_disallowed_type(self, client, admin_headers, upload_dir):
        resp = await _upload(client, admin_headers, name="x.html", content=b"<p>", mime="text/html")
        assert resp.status_code == 400
        assert _stored_files(upload_dir) == []

    async def test_rejects_empty_file(self, client, admin_headers):
        resp = await _upload(client, admin_headers, content=b"")
        assert resp.status_code == 400

    async def test_rejects_oversized_file(self, client, admin_headers, monkeypatch):
        monkeypatch.setattr(settings, "MAX_UPLOAD_SIZE_MB", 0)
        resp = await _upload(client, admin_headers)
        assert resp.status_code == 400
        assert "too large" in resp.json()["message"]

    async def test_customer_cannot_upload(self, client, customer_headers):
        resp = await _upload(client, customer_headers)
        assert resp.status_code == 403

    async def test_upload_multiple_reports_failures(self, client, admin_headers):
        resp = await client.post(
            "/api/v1/media/upload-multiple",
            files=[
                ("files", ("a.png", PNG, "image/png")),
                ("files", ("notes.pdf", b"%PDF-1.4", "application/pdf")),
                ("files", ("run.exe", b"MZ", "application/x-msdownload")),
            ],
            data={"folder": "brochures"},
            headers=admin_headers,
        )
        assert resp.status_code == 201
        data = resp.json()["data"]
        assert [m["original_name"] for m in data["uploaded"]] == ["a.png", "notes.pdf"]
        assert [f["filename"] for f in data["failed"]] == ["run.exe"]
        assert resp.json()["message"] == "2 file(s) uploaded, 1 failed"


class TestLibrary:

    async def test_list_filters(self, client, admin_headers):
        await _upload(client, admin_headers, name="deck.png", folder="fleet")
        await _upload(
            client, admin_headers, name="terms.pdf", content=b"%PDF", mime="application/pdf",
        )

        images = await client.get(
            "/api/v1/media", params={"category": "image"}, headers=admin_headers,
        )
        assert [m["original_name"] for m in images.json()["data"]["items"]] == ["deck.png"]

        by_folder = await client.get(
            "/api/v1/media", params={"folder": "fleet"}, headers=admin_headers,
        )
        assert by_folder.json()["data"]["pagination"]["total"] == 1

        search = await client.get(
            "/api/v1/media", params={"search": "TERMS"}, headers=admin_headers,
        )
        assert [m["original_name"] for m in search.json()["data"]["items"]] == ["terms.pdf"]

    async def test_stats_and_folders(self, client, admin_headers):
        await _upload(client, admin_headers, folder="fleet")
        await _upload(client, admin_headers, folder="brochures")
        await _upload(client, admin_headers, name="t.txt", content=b"hello", mime="text/plain")

        stats = (await client.get("/api/v1/media/stats", headers=admin_headers)).json()["data"]
        assert stats["total_files"] == 3
        assert stats["total_size"] == 2 * len(PNG) + 5
        assert stats["by_category"]["image"] == {"count": 2, "size": 2 * len(PNG)}
        assert stats["by_category"]["video"] == {"count": 0, "size": 0}

        folders = await client.get("/api/v1/media/folders", headers=admin_headers)
        assert folders.json()["data"] == ["brochures", "fleet"]

    async def test_update_metadata(self, client, admin_headers):
        media = (await _upload(client, admin_headers, folder="fleet")).json()["data"]
        resp = await client.put(
            f"/api/v1/media/{media['id']}",
            json={"alt_text": "Sunset over the pool deck", "tags": [" sunset ", ""], "folder": "  "},
            headers=admin_headers,
        )
        assert resp.status_code == 200
        data = resp.json()["data"]
        assert data["alt_text"] == "Sunset over the pool deck"
        assert data["tags"] == ["sunset"]
        assert data["folder"] is None

    async def test_delete_removes_file(self, client, admin_headers, upload_dir):
        media = (await _upload(client, admin_headers)).json()["data"]
        resp = await client.delete(f"/api/v1/media/{media['id']}", headers=admin_headers)
        assert resp.status_code == 200
        assert _stored_files(upload_dir) == []

        missing = await client.get(f"/api/v1/media/{media['id']}", headers=admin_headers)
        assert missing.status_code == 404

    async def test_file_kept_when_delete_fails(self, client, admin_headers, upload_dir, monkeypatch):
        media = (await _upload(client, admin_headers)).json()["data"]

        async def failing_audit(*args, **kwargs):
            raise BadRequestException("Audit store unavailable.")

        monkeypatch.setattr(media_service, "create_audit_entry", failing_audit)
        resp = await client.delete(f"/api/v1/media/{media['id']}", headers=admin_headers)
        assert resp.status_code == 400
        assert len(_stored_files(upload_dir)) == 1

        still_there = await client.get(f"/api/v1/media/{media['id']}", headers=admin_headers)
        assert still_there.status_code == 200

    async def test_bulk_delete(self, client, admin_headers, upload_dir):
        first = (await _upload(client, admin_headers)).json()["data"]
        second = (await _upload(client, admin_headers)).json()["data"]
        unknown = "00000000-0000-0000-0000-0000000000aa"

        resp = await client.post(
            "/api/v1/media/bulk-delete",
            json={"ids": [first["id"], second["id"], unknown]},
            headers=admin_headers,
        )
        data = resp.json()["data"]
        assert data["deleted"] == 2
        assert data["not_found"] == [unknown]
        assert _stored_files(upload_dir) == []

    async def test_other_tenant_cannot_see_file(self, client, admin_headers, other_tenant):
        media = (await _upload(client, admin_headers)).json()["data"]
        resp = await client.get(media["url"], headers={"X-Tenant-ID": "acme-travel"})
        assert resp.status_code == 404
