import pytest

from ikada_access.core.errors import ValidationError
from ikada_access.features.permissions.catalog import ALL, DEFAULT_PERMISSIONS, DEFAULT_ROLES, PermissionKey
from ikada_access.features.permissions.gate import Decision, decide


def test_permission_key_parse_and_str() -> None:
    key = PermissionKey.parse("news.edit")

    assert key == PermissionKey("news", "edit")
    assert str(key) == "news.edit"


@pytest.mark.parametrize("raw", ["news", "news.", ".edit", "news.edit.extra", ""])
def test_permission_key_parse_rejects_malformed(raw: str) -> None:
    with pytest.raises(ValidationError):
        PermissionKey.parse(raw)


def test_decide_is_exact_membership() -> None:
    granted = frozenset({PermissionKey("news", "manage")})

    assert decide(granted, PermissionKey("news", "manage")) is Decision.ALLOW
    # manage does not imply the other news actions
    assert decide(granted, PermissionKey("news", "edit")) is Decision.DENY
    assert decide(granted, PermissionKey("News", "manage")) is Decision.DENY
    assert decide(frozenset(), PermissionKey("news", "view")) is Decision.DENY


def test_decide_denies_non_keys() -> None:
    granted = frozenset({PermissionKey("news", "view")})

    assert decide(granted, "news.view") is Decision.DENY  # type: ignore[arg-type]


def test_default_catalog_has_unique_pairs() -> None:
    pairs = [(module, action) for module, action, _ in DEFAULT_PERMISSIONS]

    assert len(pairs) == len(set(pairs))


def test_default_roles_only_reference_catalog_keys() -> None:
    catalog = {f"{module}.{action}" for module, action, _ in DEFAULT_PERMISSIONS}

    for name, config in DEFAULT_ROLES.items():
        if config["permissions"] == ALL:
            continue
        assert set(config["permissions"]) <= catalog, name
