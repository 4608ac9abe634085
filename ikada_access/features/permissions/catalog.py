"""
Permission catalog.

Permissions are identified by an exact ``(module, action)`` pair. Keys are
compared by identity only; there is no prefix or wildcard matching, so
``news.edit`` never implies ``news.edit_all`` or anything under ``news``.
"""
from typing import NamedTuple

from ikada_access.core.errors import ValidationError


class PermissionKey(NamedTuple):
    """Opaque ``(module, action)`` capability key."""
    module: str
    action: str

    def __str__(self) -> str:
        return f"{self.module}.{self.action}"

    @classmethod
    def parse(cls, raw: str) -> "PermissionKey":
        """
        Parse ``"module.action"``.

        Raises:
            ValidationError: not exactly two non-empty dot-separated parts
        """
        parts = (raw or "").strip().split(".")
        if len(parts) != 2 or not all(p.strip() for p in parts):
            raise ValidationError(f"Invalid permission key {raw!r}; expected 'module.action'")
        return cls(parts[0].strip(), parts[1].strip())


# (module, action, description), seeded at deploy time
DEFAULT_PERMISSIONS: list[tuple[str, str, str]] = [
    # Dashboard
    ("dashboard", "view", "View the main dashboard"),
    
    # Alumni management
    ("alumni", "view", "View alumni records"),
    ("alumni", "create", "Add alumni records"),
    ("alumni", "edit", "Edit alumni records"),
    ("alumni", "delete", "Delete alumni records"),
    ("alumni", "manage", "Verify and manage all alumni records"),
    
    # Branch (syubiyah) management
    ("syubiyah", "view", "View branches"),
    ("syubiyah", "create", "Add branches"),
    ("syubiyah", "edit", "Edit branches"),
    ("syubiyah", "delete", "Delete branches"),
    
    # Mustahiq management
    ("mustahiq", "view", "View mustahiq records"),
    ("mustahiq", "create", "Add mustahiq records"),
    ("mustahiq", "edit", "Edit mustahiq records"),
    ("mustahiq", "delete", "Delete mustahiq records"),
    
    # News & articles
    ("news", "view", "View news and articles"),
    ("news", "create", "Write news and articles"),
    ("news", "edit", "Edit news and articles"),
    ("news", "delete", "Delete news and articles"),
    ("news", "manage", "Manage news categories and comments"),
    
    # Events
    ("events", "view", "View events"),
    ("events", "create", "Create events"),
    ("events", "edit", "Edit events"),
    ("events", "delete", "Delete events"),
    ("events", "manage", "Manage event categories and participants"),
    
    # Donations
    ("donations", "view", "View donation programs"),
    ("donations", "create", "Create donation programs"),
    ("donations", "edit", "Edit donation programs"),
    ("donations", "delete", "Delete donation programs"),
    ("donations", "manage", "Review transfers and manage donors"),
    
    # Reports
    ("reports", "view", "View reports"),
    ("reports", "export", "Export reports"),
    
    # Settings
    ("settings", "view", "View settings"),
    ("settings", "manage", "Manage site settings"),
    
    # Roles & permissions administration
    ("roles", "view", "View roles, permissions and assignments"),
    ("roles", "manage", "Manage roles, permissions and assignments"),
]


ALL = "ALL"

# Role name -> description and permission keys (or ALL)
DEFAULT_ROLES: dict[str, dict] = {
    "Super Admin": {
        "description": "Full access to every module",
        "permissions": ALL,
    },
    "Admin Alumni": {
        "description": "Manages alumni and branch records",
        "permissions": [
            "dashboard.view",
            "alumni.view", "alumni.create", "alumni.edit", "alumni.delete", "alumni.manage",
            "syubiyah.view",
            "mustahiq.view", "mustahiq.create", "mustahiq.edit", "mustahiq.delete",
        ],
    },
    "Admin Berita": {
        "description": "Manages news and articles",
        "permissions": [
            "dashboard.view",
            "news.view", "news.create", "news.edit", "news.delete", "news.manage",
        ],
    },
    "Admin Event": {
        "description": "Manages events and participants",
        "permissions": [
            "dashboard.view",
            "events.view", "events.create", "events.edit", "events.delete", "events.manage",
        ],
    },
    "Admin Donasi": {
        "description": "Manages donation programs",
        "permissions": [
            "dashboard.view",
            "donations.view", "donations.create", "donations.edit", "donations.delete", "donations.manage",
            "reports.view",
        ],
    },
    "Admin Laporan": {
        "description": "Reads and exports reports",
        "permissions": ["dashboard.view", "reports.view", "reports.export"],
    },
    "Viewer": {
        "description": "Read-only access",
        "permissions": [
            f"{module}.{action}" for module, action, _ in DEFAULT_PERMISSIONS if action == "view"
        ],
    },
}
