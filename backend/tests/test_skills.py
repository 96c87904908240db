"""Skill CRUD and icon lifecycle tests."""
import uuid

from tests.conftest import PNG_BYTES

SVG_BYTES = b'<svg xmlns="http://www.w3.org/2000/svg" width="1" height="1"></svg>'


async def _create(client, headers, files=None, **fields):
    data = {"name": "Python", "level": "Expert", "category": "Backend"}
    data.update(fields)
    return await client.post("/api/skills", headers=headers, data=data, files=files)


async def test_create_skill_with_svg_icon(client, admin_auth, media_store):
    _, headers = admin_auth
    files = {"icon_file": ("python.svg", SVG_BYTES, "image/svg+xml")}
    response = await _create(client, headers, files=files)
    assert response.status_code == 201
    data = response.json()["data"]
    assert data["level"] == "Expert"
    assert data["icon_url"].startswith("Uploads/skills/")
    assert data["icon_url"].endswith("-python.svg")
    assert len(media_store.saved) == 1


async def test_create_skill_invalid_level(client, admin_auth):
    _, headers = admin_auth
    response = await _create(client, headers, level="Guru")
    assert response.status_code == 400
    assert "level must be one of" in response.json()["message"]


async def test_create_skill_missing_category(client, admin_auth):
    _, headers = admin_auth
    response = await _create(client, headers, category="")
    assert response.status_code == 400


async def test_list_skills_by_category(client, admin_auth):
    _, headers = admin_auth
    await _create(client, headers, name="Python", category="Backend")
    await _create(client, headers, name="React", category="Frontend", level="Intermediate")
    await _create(client, headers, name="Go", category="Backend", level="Beginner")

    everything = (await client.get("/api/skills")).json()
    assert [s["name"] for s in everything["data"]] == ["Go", "Python", "React"]

    backend = (await client.get("/api/skills", params={"category": "Backend"})).json()
    assert backend["pagination"]["total"] == 2


async def test_update_skill_level_and_icon(client, admin_auth, media_store):
    _, headers = admin_auth
    created = (await _create(client, headers)).json()["data"]
    assert created["icon_url"] is None

    response = await client.put(
        f"/api/skills/{created['id']}",
        headers=headers,
        data={"level": "Intermediate"},
        files={"icon_file": ("py.png", PNG_BYTES, "image/png")},
    )
    data = response.json()["data"]
    assert data["level"] == "Intermediate"
    assert data["name"] == "Python"
    assert data["icon_url"].endswith("-py.png")
    assert media_store.deleted == []


async def test_clear_skill_icon(client, admin_auth, media_store):
    _, headers = admin_auth
    files = {"icon_file": ("py.png", PNG_BYTES, "image/png")}
    created = (await _create(client, headers, files=files)).json()["data"]

    response = await client.put(
        f"/api/skills/{created['id']}", headers=headers, data={"icon_url": ""},
    )
    assert response.json()["data"]["icon_url"] is None
    assert media_store.deleted == [(created["icon_url"], created["icon_public_id"])]


async def test_update_skill_invalid_level(client, admin_auth):
    _, headers = admin_auth
    created = (await _create(client, headers)).json()["data"]
    response = await client.put(
        f"/api/skills/{created['id']}", headers=headers, data={"level": "expert-ish"},
    )
    assert response.status_code == 400


async def test_delete_skill(client, admin_auth, media_store):
    _, headers = admin_auth
    files = {"icon_file": ("py.png", PNG_BYTES, "image/png")}
    created = (await _create(client, headers, files=files)).json()["data"]

    response = await client.delete(f"/api/skills/{created['id']}", headers=headers)
    assert response.status_code == 200
    assert len(media_store.deleted) == 1
    assert (await client.get(f"/api/skills/{created['id']}")).status_code == 404


async def test_delete_missing_skill(client, admin_auth):
    _, headers = admin_auth
    response = await client.delete(f"/api/skills/{uuid.uuid4()}", headers=headers)
    assert response.status_code == 404
