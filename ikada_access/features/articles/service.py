"""
Article persistence and slug handling.
"""
from datetime import datetime, timezone
import re

from sqlalchemy import func, select, or_
from sqlalchemy.ext.asyncio import AsyncSession

from ikada_access.features.articles.models import Article, ArticleStatus
from ikada_access.features.tenancy.scoper import ScopedActor
from ikada_access.utils import get_logger


log = get_logger(__name__)


def slugify(title: str) -> str:
    slug = re.sub(r"[^a-z0-9\s-]", "", title.lower())
    slug = re.sub(r"[\s-]+", "-", slug).strip("-")
    return slug or "article"


async def unique_slug(db: AsyncSession, title: str, exclude_id: str | None = None) -> str:
    """Slug for ``title``, suffixed with -2, -3, ... when already taken."""
    base = slugify(title)
    stmt = select(Article.slug).where(or_(Article.slug == base, Article.slug.like(f"{base}-%")))
    if exclude_id:
        stmt = stmt.where(Article.id != exclude_id)
    taken = set((await db.execute(stmt)).scalars().all())

    slug, counter = base, 2
    while slug in taken:
        slug = f"{base}-{counter}"
        counter += 1
    return slug


def mark_published(article: Article) -> None:
    if article.status == ArticleStatus.PUBLISHED and article.published_at is None:
        article.published_at = datetime.now(timezone.utc)


async def list_articles(
    db: AsyncSession,
    actor: ScopedActor,
    search: str | None = None,
    status: ArticleStatus | None = None,
    author_id: str | None = None,
    skip: int = 0,
    limit: int = 20,
) -> tuple[list[Article], int]:
    """
    One page of the articles in ``actor``'s scope matching the filters, newest
    first, plus the total. Callers still run the rows through the scoper.
    """
    stmt = select(Article).where(Article.visible_to(actor))
    if search:
        pattern = f"%{search}%"
        stmt = stmt.where(or_(
            Article.title.ilike(pattern),
            Article.content.ilike(pattern),
            Article.excerpt.ilike(pattern)
        ))
    if status is not None:
        stmt = stmt.where(Article.status == status)
    if author_id:
        stmt = stmt.where(Article.author_id == author_id)
    total = await db.scalar(select(func.count()).select_from(stmt.subquery()))

    stmt = stmt.order_by(Article.created_at.desc(), Article.id.desc()).offset(skip).limit(limit)
    result = await db.execute(stmt)
    return list(result.scalars().all()), total or 0
