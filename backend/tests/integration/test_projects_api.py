"""End-to-end tests for the catalog HTTP surface (catalog/routers/projects.py).

Runs against both backends via the parametrized app fixture.
"""

import pytest
from fastapi import FastAPI
from httpx import AsyncClient

pytestmark = pytest.mark.integration

PNG = b"\x89PNG\r\n\x1a\nfake-image"

FORM = {
    "title": "Portfolio A",
    "category": "Web",
    "description": "desc",
    "tech": "Go, React",
    "url": "",
}


async def _create(client: AsyncClient, **overrides) -> dict:
    response = await client.post("/api/projects", data={**FORM, **overrides})
    assert response.status_code == 201, response.text
    return response.json()


# --- Example scenario ---


async def test_login_create_delete_scenario(admin_client: AsyncClient):
    project = await _create(admin_client)

    assert project["tech"] == ["Go", "React"]
    assert project["url"] == ""
    assert project["image"] is None
    assert isinstance(project["id"], int)
    assert project["createdAt"]

    response = await admin_client.delete(f"/api/projects/{project['id']}")
    assert response.status_code == 204
    assert response.content == b""

    listing = (await admin_client.get("/api/projects")).json()
    assert project["id"] not in [p["id"] for p in listing]


# --- Reads ---


async def test_reads_need_no_session(client: AsyncClient):
    response = await client.get("/api/projects")
    assert response.status_code == 200
    assert response.json() == []


async def test_get_one(admin_client: AsyncClient):
    project = await _create(admin_client)

    response = await admin_client.get(f"/api/projects/{project['id']}")
    assert response.status_code == 200
    assert response.json() == project


async def test_get_unknown_and_malformed_ids(client: AsyncClient):
    missing = await client.get("/api/projects/1")
    assert missing.status_code == 404
    assert missing.json() == {"message": "Project not found"}

    malformed = await client.get("/api/projects/abc")
    assert malformed.status_code == 400


# --- Authorization gate ---


async def test_mutations_require_session(client: AsyncClient):
    create = await client.post("/api/projects", data=FORM)
    update = await client.put("/api/projects/1", data={"title": "X"})
    delete = await client.delete("/api/projects/1")

    for response in (create, update, delete):
        assert response.status_code == 401
        assert response.json() == {"message": "Unauthorized: You must be logged in."}

    assert (await client.get("/api/projects")).json() == []


async def test_logout_revokes_mutation_rights(admin_client: AsyncClient):
    project = await _create(admin_client)
    await admin_client.post("/api/logout")

    response = await admin_client.delete(f"/api/projects/{project['id']}")
    assert response.status_code == 401
    assert len((await admin_client.get("/api/projects")).json()) == 1


async def test_forged_cookie_is_rejected(client: AsyncClient, app: FastAPI):
    cookie_name = app.state.settings.SESSION_COOKIE_NAME
    response = await client.post(
        "/api/projects", data=FORM, headers={"Cookie": f"{cookie_name}=forged"}
    )
    assert response.status_code == 401


# --- Create ---


@pytest.mark.parametrize("missing", ["title", "category", "description"])
async def test_create_missing_required_field(admin_client: AsyncClient, missing: str):
    form = {k: v for k, v in FORM.items() if k != missing}

    response = await admin_client.post("/api/projects", data=form)

    assert response.status_code == 400
    assert missing in response.json()["message"]
    assert (await admin_client.get("/api/projects")).json() == []


async def test_create_with_image_serves_asset(admin_client: AsyncClient, app: FastAPI):
    response = await admin_client.post(
        "/api/projects",
        data=FORM,
        files={"image": ("shot.PNG", PNG, "image/png")},
    )
    assert response.status_code == 201
    image = response.json()["image"]
    assert image.startswith("/uploads/")
    assert image.endswith(".png")

    served = await admin_client.get(image)
    assert served.status_code == 200
    assert served.content == PNG


async def test_create_rejects_oversized_image(admin_client: AsyncClient, app: FastAPI):
    limit = app.state.settings.MAX_IMAGE_BYTES

    response = await admin_client.post(
        "/api/projects",
        data=FORM,
        files={"image": ("big.png", b"x" * (limit + 1), "image/png")},
    )

    assert response.status_code == 400
    assert list(app.state.store.assets.root.iterdir()) == []


# --- Update ---


async def test_partial_update(admin_client: AsyncClient):
    project = await _create(admin_client, url="https://a.dev")

    response = await admin_client.put(f"/api/projects/{project['id']}", data={"title": "X"})

    assert response.status_code == 200
    updated = response.json()
    assert updated["title"] == "X"
    assert {k: v for k, v in updated.items() if k != "title"} == {
        k: v for k, v in project.items() if k != "title"
    }


async def test_update_replaces_image(admin_client: AsyncClient, app: FastAPI):
    store = app.state.store
    created = (
        await admin_client.post(
            "/api/projects", data=FORM, files={"image": ("a.png", PNG, "image/png")}
        )
    ).json()

    response = await admin_client.put(
        f"/api/projects/{created['id']}",
        files={"image": ("b.jpg", b"jpeg-bytes", "image/jpeg")},
    )
    assert response.status_code == 200
    await store.assets.drain()

    new_image = response.json()["image"]
    assert new_image != created["image"]
    assert store.assets.exists(new_image)
    assert not store.assets.exists(created["image"])


async def test_update_with_no_fields(admin_client: AsyncClient):
    project = await _create(admin_client)

    response = await admin_client.put(f"/api/projects/{project['id']}", data={})
    assert response.status_code == 400


async def test_update_unknown_id(admin_client: AsyncClient):
    response = await admin_client.put("/api/projects/777", data={"title": "X"})
    assert response.status_code == 404


# --- Delete ---


async def test_delete_removes_asset(admin_client: AsyncClient, app: FastAPI):
    store = app.state.store
    created = (
        await admin_client.post(
            "/api/projects", data=FORM, files={"image": ("a.png", PNG, "image/png")}
        )
    ).json()

    response = await admin_client.delete(f"/api/projects/{created['id']}")
    assert response.status_code == 204
    await store.assets.drain()

    assert not store.assets.exists(created["image"])
    assert (await admin_client.get(created["image"])).status_code == 404


async def test_delete_unknown_id(admin_client: AsyncClient):
    response = await admin_client.delete("/api/projects/777")
    assert response.status_code == 404


async def test_out_of_range_id_is_not_found(admin_client: AsyncClient):
    huge = "9" * 30

    assert (await admin_client.get(f"/api/projects/{huge}")).status_code == 404
    assert (await admin_client.delete(f"/api/projects/{huge}")).status_code == 404
    updated = await admin_client.put(f"/api/projects/{huge}", data={"title": "x"})
    assert updated.status_code == 404
