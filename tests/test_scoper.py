from types import SimpleNamespace

import pytest

from ikada_access.core.errors import ValidationError
from ikada_access.features.tenancy.scoper import (
    ActorScope,
    VisibilityMode,
    VisibilityPolicy,
    ensure_writable,
    filter_in_scope,
    in_scope,
)


CENTRAL = SimpleNamespace(scope=ActorScope.CENTRAL, branch_id=None)
JATIM = SimpleNamespace(scope=ActorScope.BRANCH, branch_id="jatim")


def record(name: str, mode: VisibilityMode, targets: list[str] | None = None) -> SimpleNamespace:
    return SimpleNamespace(name=name, visibility=mode, target_branch_ids=targets or [])


@pytest.mark.parametrize(
    ("actor", "policy", "expected"),
    [
        (CENTRAL, VisibilityPolicy(VisibilityMode.ALL_BRANCHES), True),
        (CENTRAL, VisibilityPolicy(VisibilityMode.SPECIFIC_BRANCHES, frozenset({"jabar"})), True),
        (JATIM, VisibilityPolicy(VisibilityMode.ALL_BRANCHES), True),
        (JATIM, VisibilityPolicy(VisibilityMode.SPECIFIC_BRANCHES, frozenset({"jatim", "jabar"})), True),
        (JATIM, VisibilityPolicy(VisibilityMode.SPECIFIC_BRANCHES, frozenset({"jabar"})), False),
    ],
)
def test_in_scope_decision_table(actor, policy, expected) -> None:
    assert in_scope(actor, policy) is expected


def test_branch_actor_without_branch_sees_only_all_branches() -> None:
    orphan = SimpleNamespace(scope=ActorScope.BRANCH, branch_id=None)

    assert in_scope(orphan, VisibilityPolicy(VisibilityMode.ALL_BRANCHES))
    assert not in_scope(orphan, VisibilityPolicy(VisibilityMode.SPECIFIC_BRANCHES, frozenset({"jatim"})))


def test_filter_in_scope_keeps_order_and_drops_other_branches() -> None:
    records = [
        record("x", VisibilityMode.ALL_BRANCHES),
        record("y", VisibilityMode.SPECIFIC_BRANCHES, ["jabar"]),
        record("z", VisibilityMode.SPECIFIC_BRANCHES, ["jatim"]),
    ]

    assert [r.name for r in filter_in_scope(JATIM, records)] == ["x", "z"]
    assert [r.name for r in filter_in_scope(CENTRAL, records)] == ["x", "y", "z"]


def test_filter_in_scope_is_a_subset_of_input() -> None:
    records = [record(str(i), VisibilityMode.SPECIFIC_BRANCHES, ["jatim"] if i % 2 else ["jabar"]) for i in range(6)]

    visible = filter_in_scope(JATIM, records)

    assert all(r in records for r in visible)
    assert len(visible) == 3


def test_create_rejects_specific_branches_without_targets() -> None:
    with pytest.raises(ValidationError):
        VisibilityPolicy.create(VisibilityMode.SPECIFIC_BRANCHES, [])

    with pytest.raises(ValidationError):
        VisibilityPolicy.create(VisibilityMode.SPECIFIC_BRANCHES, None)


def test_create_clears_targets_for_all_branches() -> None:
    policy = VisibilityPolicy.create(VisibilityMode.ALL_BRANCHES, ["jatim"])

    assert policy.target_branch_ids == frozenset()


def test_ensure_writable_rejects_branch_actor_excluding_itself() -> None:
    foreign = VisibilityPolicy.create(VisibilityMode.SPECIFIC_BRANCHES, ["jabar"])

    with pytest.raises(ValidationError):
        ensure_writable(JATIM, foreign)

    ensure_writable(CENTRAL, foreign)
    ensure_writable(JATIM, VisibilityPolicy.create(VisibilityMode.SPECIFIC_BRANCHES, ["jatim", "jabar"]))
