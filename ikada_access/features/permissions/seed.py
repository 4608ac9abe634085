"""
Seeding of the default permission catalog and roles.

Safe to run repeatedly: existing permissions and roles are left as they are
and only missing role grants are added.
"""
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ikada_access.features.permissions import service
from ikada_access.features.permissions.catalog import ALL, DEFAULT_PERMISSIONS, DEFAULT_ROLES
from ikada_access.features.permissions.models import Permission, Role
from ikada_access.utils import get_logger


log = get_logger(__name__)


async def seed_permissions(db: AsyncSession) -> dict[str, Permission]:
    """
    Create default permissions.
    
    Returns:
        Dictionary mapping ``module.action`` keys to Permission objects
    """
    log.info("Creating default permissions...")
    result = await db.execute(select(Permission))
    permissions_map = {p.name: p for p in result.scalars().all()}
    created = 0

    for module, action, description in DEFAULT_PERMISSIONS:
        key = f"{module}.{action}"
        if key in permissions_map:
            log.debug("Permission %r already exists, skipping", key)
            continue

        permission = Permission(module=module, action=action, description=description)
        db.add(permission)
        permissions_map[key] = permission
        created += 1

    await db.commit()
    log.info("Created %d permissions (%d total)", created, len(permissions_map))
    return permissions_map


async def seed_roles(db: AsyncSession, permissions_map: dict[str, Permission]) -> dict[str, Role]:
    """
    Create default roles and grant their permissions.
    
    Args:
        db: Database session
        permissions_map: ``module.action`` -> Permission, from ``seed_permissions``
    """
    log.info("Creating default roles...")
    roles_map = {}

    for role_name, role_config in DEFAULT_ROLES.items():
        role = await db.scalar(select(Role).where(Role.name == role_name))
        if role is None:
            role = await service.create_role(db, name=role_name, description=role_config["description"])

        if role_config["permissions"] == ALL:
            wanted = list(permissions_map.values())
        else:
            wanted = []
            for key in role_config["permissions"]:
                if key in permissions_map:
                    wanted.append(permissions_map[key])
                else:
                    log.warning("Permission %r not found for role %r", key, role_name)

        held = await service.role_permission_ids(db, role.id)
        for permission in wanted:
            if permission.id not in held:
                await service.grant_permission(db, role.id, permission.id)

        roles_map[role_name] = role
        log.info("Role %r holds %d permissions", role_name, len(wanted))

    return roles_map


async def seed_defaults(db: AsyncSession, super_admin_actor_id: str | None = None) -> dict[str, Role]:
    """Seed the catalog and roles, optionally making one actor Super Admin."""
    permissions_map = await seed_permissions(db)
    roles_map = await seed_roles(db, permissions_map)

    if super_admin_actor_id:
        await service.assign_role(db, super_admin_actor_id, roles_map["Super Admin"].id)
        log.info("Actor %s is Super Admin", super_admin_actor_id)
    return roles_map
