import pytest


@pytest.mark.asyncio
async def test_branch_crud(async_client, admin, headers_for) -> None:
    headers = headers_for(admin)

    created = await async_client.post(
        "/branches", json={"name": "Syubiyah Kediri", "province": "Jawa Timur", "regency": "Kediri"}, headers=headers
    )
    assert created.status_code == 201
    branch = created.json()

    duplicate = await async_client.post("/branches", json={"name": "Syubiyah Kediri"}, headers=headers)
    assert duplicate.status_code == 409

    updated = await async_client.patch(f"/branches/{branch['id']}", json={"regency": "Kota Kediri"}, headers=headers)
    assert updated.json()["regency"] == "Kota Kediri"
    assert updated.json()["name"] == "Syubiyah Kediri"

    listed = await async_client.get("/branches", headers=headers)
    assert [b["name"] for b in listed.json()] == ["Syubiyah Kediri"]

    deleted = await async_client.delete(f"/branches/{branch['id']}", headers=headers)
    assert deleted.status_code == 204
    assert (await async_client.get(f"/branches/{branch['id']}", headers=headers)).status_code == 404


@pytest.mark.asyncio
async def test_branch_with_scoped_actors_cannot_be_deleted(async_client, create_actor, branches, admin, headers_for) -> None:
    await create_actor("Ketua Jatim", branch=branches["jatim"])

    response = await async_client.delete(f"/branches/{branches['jatim'].id}", headers=headers_for(admin))

    assert response.status_code == 409


@pytest.mark.asyncio
async def test_branch_routes_are_guarded(async_client, session, create_actor, default_roles, headers_for) -> None:
    from ikada_access.features.permissions import service

    viewer = await create_actor()
    await service.assign_role(session, viewer.id, default_roles["Viewer"].id)

    assert (await async_client.get("/branches", headers=headers_for(viewer))).status_code == 200
    forbidden = await async_client.post("/branches", json={"name": "Syubiyah Baru"}, headers=headers_for(viewer))
    assert forbidden.status_code == 403


@pytest.mark.asyncio
async def test_branch_targeted_by_content_cannot_be_deleted(async_client, admin, headers_for) -> None:
    headers = headers_for(admin)
    branch = (await async_client.post("/branches", json={"name": "Syubiyah Malang"}, headers=headers)).json()
    other = (await async_client.post("/branches", json={"name": "Syubiyah Blitar"}, headers=headers)).json()
    article = await async_client.post(
        "/articles",
        json={
            "title": "Kajian Malang",
            "content": "body",
            "visibility": "SPECIFIC_BRANCHES",
            "target_branch_ids": [branch["id"]],
        },
        headers=headers,
    )
    event = await async_client.post(
        "/events",
        json={
            "title": "Reuni Blitar",
            "start_at": "2026-12-01T09:00:00Z",
            "visibility": "SPECIFIC_BRANCHES",
            "target_branch_ids": [other["id"]],
        },
        headers=headers,
    )
    assert (article.status_code, event.status_code) == (201, 201)

    assert (await async_client.delete(f"/branches/{branch['id']}", headers=headers)).status_code == 409
    assert (await async_client.delete(f"/branches/{other['id']}", headers=headers)).status_code == 409

    # The stored targets still resolve, so keeping them on update works
    kept = await async_client.patch(
        f"/articles/{article.json()['id']}", json={"visibility": "SPECIFIC_BRANCHES"}, headers=headers
    )
    assert kept.status_code == 200

    # Once nothing targets it the branch can go
    retargeted = await async_client.patch(
        f"/articles/{article.json()['id']}", json={"visibility": "ALL_BRANCHES"}, headers=headers
    )
    assert retargeted.json()["target_branch_ids"] == []
    assert (await async_client.delete(f"/branches/{branch['id']}", headers=headers)).status_code == 204


@pytest.mark.asyncio
async def test_branch_id_prefix_does_not_count_as_target(session, branches) -> None:
    from sqlalchemy import select

    from ikada_access.features.articles.models import Article
    from ikada_access.features.tenancy.scoper import VisibilityMode, VisibilityPolicy

    article = Article(title="Jatim", slug="jatim", content="body")
    article.apply_visibility(
        VisibilityPolicy(VisibilityMode.SPECIFIC_BRANCHES, frozenset({branches["jatim"].id + "X"}))
    )
    session.add(article)
    await session.commit()

    matched = await session.execute(select(Article.id).where(Article.targets_branch(branches["jatim"].id)))

    assert matched.first() is None
