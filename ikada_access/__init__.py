"""
IKADA access-control service.

Role-based access control and branch-scoped content visibility for the
IKADA alumni administration dashboard.
"""
