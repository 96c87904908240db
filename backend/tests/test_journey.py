"""Journey timeline tests."""
import uuid


async def _create(client, headers, **fields):
    body = {
        "title": "Backend Engineer",
        "company": "Acme",
        "start_date": "2022-01-01",
        "end_date": "2023-06-30",
        "type": "work",
    }
    body.update(fields)
    return await client.post("/api/journey", headers=headers, json=body)


async def test_create_and_list_newest_first(client, admin_auth):
    _, headers = admin_auth
    assert (await _create(client, headers)).status_code == 201
    await _create(client, headers, title="BSc", company="Uni", type="education",
                  start_date="2016-09-01", end_date="2020-06-30")
    await _create(client, headers, title="Lead", start_date="2023-07-01", end_date=None)

    body = (await client.get("/api/journey")).json()
    assert [i["title"] for i in body["data"]] == ["Lead", "Backend Engineer", "BSc"]
    assert body["data"][0]["end_date"] is None

    education = (await client.get("/api/journey", params={"type": "education"})).json()
    assert [i["title"] for i in education["data"]] == ["BSc"]


async def test_create_rejects_end_before_start(client, admin_auth):
    _, headers = admin_auth
    response = await _create(client, headers, start_date="2024-01-01", end_date="2023-01-01")
    assert response.status_code == 400


async def test_create_rejects_unknown_type(client, admin_auth):
    _, headers = admin_auth
    response = await _create(client, headers, type="hobby")
    assert response.status_code == 400


async def test_create_requires_admin(client, user_auth):
    _, headers = user_auth
    assert (await _create(client, headers)).status_code == 403


async def test_partial_update(client, admin_auth):
    _, headers = admin_auth
    item = (await _create(client, headers, description="APIs")).json()["data"]

    response = await client.put(f"/api/journey/{item['id']}", headers=headers, json={"company": "Globex"})
    data = response.json()["data"]
    assert data["company"] == "Globex"
    assert data["description"] == "APIs"
    assert data["start_date"] == "2022-01-01"


async def test_update_checks_dates_against_stored_values(client, admin_auth):
    _, headers = admin_auth
    item = (await _create(client, headers)).json()["data"]
    response = await client.put(f"/api/journey/{item['id']}", headers=headers, json={"end_date": "2021-01-01"})
    assert response.status_code == 400


async def test_update_rejects_empty_and_null_required(client, admin_auth):
    _, headers = admin_auth
    item = (await _create(client, headers)).json()["data"]
    assert (await client.put(f"/api/journey/{item['id']}", headers=headers, json={})).status_code == 400
    assert (await client.put(f"/api/journey/{item['id']}", headers=headers, json={"title": None})).status_code == 400


async def test_delete_item(client, admin_auth):
    _, headers = admin_auth
    item = (await _create(client, headers)).json()["data"]
    assert (await client.delete(f"/api/journey/{item['id']}", headers=headers)).status_code == 200
    assert (await client.get(f"/api/journey/{item['id']}")).status_code == 404


async def test_get_missing_item(client):
    assert (await client.get(f"/api/journey/{uuid.uuid4()}")).status_code == 404
