import pytest

from ikada_access.core.database.base import generate_ulid


def test_generate_ulid_returns_ulid_strings() -> None:
    first, second = generate_ulid(), generate_ulid()

    assert isinstance(first, str)
    assert len(first) == 26
    assert first != second


@pytest.mark.asyncio
async def test_primary_keys_are_generated_on_insert(session) -> None:
    from ikada_access.features.branches.models import Branch

    branch = Branch(name="Syubiyah Madura")
    session.add(branch)
    await session.commit()

    assert isinstance(branch.id, str)
    assert len(branch.id) == 26
