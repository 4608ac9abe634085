"""
Permission management feature module.

Implements Role-Based Access Control (RBAC): the permission catalog, roles,
role/permission and actor/role assignments, effective-permission resolution
and the enforcement gate.
"""
