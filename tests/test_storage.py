"""Uploads to local storage and ACL-checked object serving."""
import pytest

from desktown.core.config import settings
from desktown.db.models import StoredObject
from desktown.services import object_storage_service, storage_client

PNG = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32


@pytest.fixture(autouse=True)
def local_storage(tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "STORAGE_BACKEND", "local")
    monkeypatch.setattr(settings, "LOCAL_STORAGE_PATH", str(tmp_path / "objects"))
    return tmp_path / "objects"


async def _upload(client, visibility: str = "public", content_type: str = "image/png", data: bytes = PNG):
    return await client.post(
        "/api/upload/media",
        files={"file": ("photo.png", data, content_type)},
        data={"visibility": visibility},
    )


@pytest.mark.asyncio
async def test_upload_public_object(authed_client, client, test_user, db, local_storage):
    res = await _upload(authed_client)
    assert res.status_code == 201
    body = res.json()
    assert body["object_path"].startswith("uploads/")
    assert body["object_path"].endswith(".png")
    assert body["url"] == f"/objects/{body['object_path']}"
    assert body["size_bytes"] == len(PNG)
    assert (local_storage / body["object_path"]).read_bytes() == PNG

    record = db.query(StoredObject).one()
    assert record.owner_id == test_user.id

    served = await client.get(body["url"])
    assert served.status_code == 200
    assert served.content == PNG
    assert served.headers["content-type"] == "image/png"
    assert served.headers["cache-control"].startswith("public")


@pytest.mark.asyncio
async def test_private_object_acl(authed_client, client, admin_client, make_user, make_client):
    url = (await _upload(authed_client, visibility="private")).json()["url"]

    assert (await client.get(url)).status_code == 401
    assert (await make_client(make_user()).get(url)).status_code == 403

    own = await authed_client.get(url)
    assert own.status_code == 200
    assert own.headers["cache-control"] == "private, no-store"

    assert (await admin_client.get(url)).status_code == 200


@pytest.mark.asyncio
async def test_unknown_object_404(client):
    assert (await client.get("/objects/uploads/missing.png")).status_code == 404


@pytest.mark.asyncio
async def test_missing_bytes_404(authed_client, client, local_storage):
    body = (await _upload(authed_client)).json()
    (local_storage / body["object_path"]).unlink()
    assert (await client.get(body["url"])).status_code == 404


@pytest.mark.asyncio
async def test_rejects_unsupported_type(authed_client, db):
    res = await _upload(authed_client, content_type="application/x-msdownload")
    assert res.status_code == 400
    assert db.query(StoredObject).count() == 0


@pytest.mark.asyncio
async def test_rejects_empty_file(authed_client):
    res = await _upload(authed_client, data=b"")
    assert res.status_code == 400


@pytest.mark.asyncio
async def test_upload_requires_login_and_csrf(client, test_user, make_client):
    assert (await _upload(client)).status_code == 401
    no_csrf = make_client(test_user, csrf=False)
    assert (await _upload(no_csrf)).status_code == 403


def test_validate_upload_size_limit(monkeypatch):
    monkeypatch.setattr(settings, "MAX_UPLOAD_BYTES", 10)
    with pytest.raises(ValueError):
        object_storage_service.validate_upload("image/png", 11)
    object_storage_service.validate_upload("image/png", 10)
    object_storage_service.validate_upload("application/pdf", 1)


def test_local_path_rejects_traversal():
    with pytest.raises(ValueError):
        storage_client.local_path("../../etc/passwd")


def test_build_object_path_keeps_safe_extension():
    path = object_storage_service.build_object_path("holiday photo.JPG")
    assert path.startswith("uploads/")
    assert path.endswith(".jpg")


@pytest.mark.asyncio
async def test_rejects_oversized_upload(authed_client, db, monkeypatch):
    monkeypatch.setattr(settings, "MAX_UPLOAD_BYTES", 10)
    res = await _upload(authed_client)
    assert res.status_code == 400
    assert "exceeds" in res.json()["message"]
    assert db.query(StoredObject).count() == 0


@pytest.mark.asyncio
async def test_oversized_content_length_rejected_before_measuring(authed_client, db, monkeypatch):
    from desktown.routers import storage as storage_router

    async def _never_measured(file):
        raise AssertionError("upload should be rejected from Content-Length")

    monkeypatch.setattr(settings, "MAX_UPLOAD_BYTES", 10)
    monkeypatch.setattr(storage_router, "get_upload_file_size", _never_measured)
    res = await _upload(authed_client, data=PNG + b"\x00" * (70 * 1024))
    assert res.status_code == 400
    assert db.query(StoredObject).count() == 0


def test_content_length_limit_allows_multipart_overhead():
    from desktown.utils.file_upload import MULTIPART_OVERHEAD_BYTES, content_length_exceeds_limit

    limit = 1024
    assert not content_length_exceeds_limit(None, max_size_bytes=limit)
    assert not content_length_exceeds_limit("garbage", max_size_bytes=limit)
    assert not content_length_exceeds_limit(str(limit + MULTIPART_OVERHEAD_BYTES), max_size_bytes=limit)
    assert content_length_exceeds_limit(str(limit + MULTIPART_OVERHEAD_BYTES + 1), max_size_bytes=limit)
