import pytest
from sqlalchemy import func, select

from ikada_access.core.errors import ConflictError, NotFoundError
from ikada_access.features.permissions import service
from ikada_access.features.permissions.catalog import PermissionKey
from ikada_access.features.permissions.gate import Decision, authorize, effective_permissions
from ikada_access.features.permissions.models import role_permissions, user_roles
from ikada_access.features.permissions.resolver import resolve, resolve_keys, resolve_permissions


NEWS_EDIT = PermissionKey("news", "edit")


async def _catalog(session, *keys: str) -> dict[str, object]:
    created = {}
    for key in keys:
        module, action = key.split(".")
        created[key] = await service.create_permission(session, module=module, action=action)
    return created


@pytest.mark.asyncio
async def test_effective_permissions_are_union_of_roles(session, create_actor) -> None:
    perms = await _catalog(session, "news.view", "news.edit", "events.view")
    writer = await service.create_role(session, name="Writer")
    planner = await service.create_role(session, name="Planner")
    await service.grant_permission(session, writer.id, perms["news.view"].id)
    await service.grant_permission(session, writer.id, perms["news.edit"].id)
    await service.grant_permission(session, planner.id, perms["news.view"].id)
    await service.grant_permission(session, planner.id, perms["events.view"].id)

    actor = await create_actor()
    await service.assign_role(session, actor.id, writer.id)
    await service.assign_role(session, actor.id, planner.id)

    assert await resolve(session, actor.id) == {p.id for p in perms.values()}
    assert await resolve_keys(session, actor.id) == {
        PermissionKey("news", "view"), NEWS_EDIT, PermissionKey("events", "view")
    }
    assert [p.name for p in await resolve_permissions(session, actor.id)] == [
        "events.view", "news.edit", "news.view"
    ]


@pytest.mark.asyncio
async def test_inactive_role_contributes_nothing(session, create_actor) -> None:
    perms = await _catalog(session, "news.edit")
    role = await service.create_role(session, name="Admin Berita")
    await service.grant_permission(session, role.id, perms["news.edit"].id)
    actor = await create_actor()
    await service.assign_role(session, actor.id, role.id)

    assert await authorize(session, actor.id, NEWS_EDIT) is Decision.ALLOW

    await service.set_role_active(session, role.id, False)
    assert await authorize(session, actor.id, NEWS_EDIT) is Decision.DENY
    # Edges survive deactivation
    assert await service.role_permission_ids(session, role.id) == {perms["news.edit"].id}

    await service.set_role_active(session, role.id, True)
    assert await authorize(session, actor.id, NEWS_EDIT) is Decision.ALLOW


@pytest.mark.asyncio
async def test_inactive_role_can_be_assigned_but_stays_inert(session, create_actor) -> None:
    perms = await _catalog(session, "news.edit")
    role = await service.create_role(session, name="Dormant", is_active=False)
    await service.grant_permission(session, role.id, perms["news.edit"].id)
    actor = await create_actor()

    assert await service.assign_role(session, actor.id, role.id) is True
    assert await resolve(session, actor.id) == frozenset()


@pytest.mark.asyncio
async def test_grant_and_assign_are_idempotent(session, create_actor) -> None:
    perms = await _catalog(session, "news.edit")
    role = await service.create_role(session, name="Editor")
    actor = await create_actor()

    assert await service.grant_permission(session, role.id, perms["news.edit"].id) is True
    assert await service.grant_permission(session, role.id, perms["news.edit"].id) is False
    assert await service.assign_role(session, actor.id, role.id) is True
    assert await service.assign_role(session, actor.id, role.id) is False

    edges = await session.scalar(select(func.count()).select_from(role_permissions))
    assignments = await session.scalar(select(func.count()).select_from(user_roles))
    assert (edges, assignments) == (1, 1)

    assert await service.revoke_permission(session, role.id, perms["news.edit"].id) is True
    assert await service.revoke_permission(session, role.id, perms["news.edit"].id) is False
    assert await service.unassign_role(session, actor.id, role.id) is True
    assert await service.unassign_role(session, actor.id, role.id) is False


@pytest.mark.asyncio
async def test_edges_require_existing_endpoints(session, create_actor) -> None:
    perms = await _catalog(session, "news.edit")
    role = await service.create_role(session, name="Editor")
    actor = await create_actor()

    with pytest.raises(NotFoundError):
        await service.grant_permission(session, "missing", perms["news.edit"].id)
    with pytest.raises(NotFoundError):
        await service.grant_permission(session, role.id, "missing")
    with pytest.raises(NotFoundError):
        await service.assign_role(session, "missing", role.id)
    with pytest.raises(NotFoundError):
        await service.assign_role(session, actor.id, "missing")


@pytest.mark.asyncio
async def test_duplicate_names_conflict(session) -> None:
    await _catalog(session, "news.edit")
    await service.create_role(session, name="Editor")
    other = await service.create_role(session, name="Reviewer")

    with pytest.raises(ConflictError):
        await service.create_permission(session, module="news", action="edit")
    with pytest.raises(ConflictError):
        await service.create_role(session, name="Editor")
    with pytest.raises(ConflictError):
        await service.update_role(session, other.id, name="Editor")


@pytest.mark.asyncio
async def test_delete_role_cascades_to_every_edge(session, create_actor) -> None:
    perms = await _catalog(session, "news.edit", "news.view")
    role = await service.create_role(session, name="Admin Berita")
    for permission in perms.values():
        await service.grant_permission(session, role.id, permission.id)
    first, second = await create_actor(), await create_actor()
    await service.assign_role(session, first.id, role.id)
    await service.assign_role(session, second.id, role.id)

    await service.delete_role(session, role.id)

    assert await session.scalar(select(func.count()).select_from(role_permissions)) == 0
    assert await session.scalar(select(func.count()).select_from(user_roles)) == 0
    assert await effective_permissions(session, first.id) == frozenset()
    with pytest.raises(NotFoundError):
        await service.get_role(session, role.id)


@pytest.mark.asyncio
async def test_delete_permission_revokes_it_everywhere(session, create_actor) -> None:
    perms = await _catalog(session, "news.edit")
    role = await service.create_role(session, name="Editor")
    await service.grant_permission(session, role.id, perms["news.edit"].id)
    actor = await create_actor()
    await service.assign_role(session, actor.id, role.id)

    await service.delete_permission(session, perms["news.edit"].id)

    assert await authorize(session, actor.id, NEWS_EDIT) is Decision.DENY
    assert await service.role_permission_ids(session, role.id) == frozenset()


@pytest.mark.asyncio
async def test_module_toggle_converges_to_all_or_nothing(session) -> None:
    perms = await _catalog(session, "news.view", "news.edit", "news.delete", "events.view")
    role = await service.create_role(session, name="Editor")
    await service.grant_permission(session, role.id, perms["news.view"].id)
    await service.grant_permission(session, role.id, perms["events.view"].id)
    news_ids = {perms[k].id for k in ("news.view", "news.edit", "news.delete")}

    # Partial -> all
    outcome = await service.toggle_module_permissions(session, role.id, "news")
    assert outcome.state == "granted"
    assert set(outcome.granted) == {perms["news.edit"].id, perms["news.delete"].id}
    assert news_ids <= await service.role_permission_ids(session, role.id)

    # All -> none, other modules untouched
    outcome = await service.toggle_module_permissions(session, role.id, "news")
    assert outcome.state == "revoked"
    assert await service.role_permission_ids(session, role.id) == {perms["events.view"].id}

    # None -> all
    outcome = await service.toggle_module_permissions(session, role.id, "news")
    assert outcome.state == "granted"
    assert news_ids <= await service.role_permission_ids(session, role.id)


@pytest.mark.asyncio
async def test_module_toggle_unknown_module(session) -> None:
    role = await service.create_role(session, name="Editor")

    with pytest.raises(NotFoundError):
        await service.toggle_module_permissions(session, role.id, "nonexistent")


@pytest.mark.asyncio
async def test_gate_fails_closed(session, create_actor, default_roles) -> None:
    ghost_key = PermissionKey("news", "publish_everywhere")
    inactive = await create_actor(is_active=False)
    await service.assign_role(session, inactive.id, default_roles["Super Admin"].id)
    holder = await create_actor()
    await service.assign_role(session, holder.id, default_roles["Super Admin"].id)

    assert await authorize(session, None, NEWS_EDIT) is Decision.DENY
    assert await authorize(session, "no-such-actor", NEWS_EDIT) is Decision.DENY
    assert await authorize(session, inactive.id, NEWS_EDIT) is Decision.DENY
    # A key missing from the catalog is never granted, even to Super Admin
    assert await authorize(session, holder.id, ghost_key) is Decision.DENY
    assert await authorize(session, holder.id, NEWS_EDIT) is Decision.ALLOW


@pytest.mark.asyncio
async def test_seeding_is_repeatable(session, default_roles) -> None:
    from ikada_access.features.permissions.seed import seed_defaults

    before = await session.scalar(select(func.count()).select_from(role_permissions))
    again = await seed_defaults(session)

    assert set(again) == set(default_roles)
    assert await session.scalar(select(func.count()).select_from(role_permissions)) == before


@pytest.mark.asyncio
async def test_gate_denies_when_store_fails(session, create_actor, default_roles, monkeypatch) -> None:
    from sqlalchemy.exc import OperationalError

    from ikada_access.features.permissions import gate

    holder = await create_actor()
    await service.assign_role(session, holder.id, default_roles["Super Admin"].id)
    assert await authorize(session, holder.id, NEWS_EDIT) is Decision.ALLOW

    async def unavailable(db, actor_id):
        raise OperationalError("SELECT ...", {}, Exception("database is locked"))

    monkeypatch.setattr(gate, "resolve_keys", unavailable)

    assert await effective_permissions(session, holder.id) == frozenset()
    assert await authorize(session, holder.id, NEWS_EDIT) is Decision.DENY
