"""
News article routes.

Every read is scoped to the actor's branch; records outside it answer 404.
"""
from typing import Annotated, Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from ikada_access.core.database.engine import get_db
from ikada_access.features.articles import service
from ikada_access.features.articles.models import Article, ArticleStatus
from ikada_access.features.articles.schemas import ArticleCreate, ArticleUpdate, ArticleResponse, ArticleListResponse
from ikada_access.features.permissions.dependencies import AccessContext, require_permission
from ikada_access.features.tenancy.service import policy_for_write, policy_for_update
from ikada_access.utils import get_logger


log = get_logger(__name__)
router = APIRouter(tags=["articles"])

Db = Annotated[AsyncSession, Depends(get_db)]


@router.get("", response_model=ArticleListResponse)
async def list_articles(
    db: Db,
    access: Annotated[AccessContext, Depends(require_permission("news", "view"))],
    search: Optional[str] = None,
    article_status: Optional[ArticleStatus] = Query(None, alias="status"),
    author_id: Optional[str] = None,
    skip: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100)
):
    """List the articles visible to the current actor."""
    page, total = await service.list_articles(
        db,
        access.actor,
        search=search,
        status=article_status,
        author_id=author_id,
        skip=skip,
        limit=limit
    )
    return ArticleListResponse(
        items=[ArticleResponse.model_validate(a) for a in access.visible(page)],
        total=total,
        skip=skip,
        limit=limit
    )


@router.get("/{article_id}", response_model=ArticleResponse)
async def get_article(
    article_id: str,
    db: Db,
    access: Annotated[AccessContext, Depends(require_permission("news", "view"))]
):
    """Get an article visible to the current actor."""
    return access.ensure_visible(await db.get(Article, article_id), "Article")


@router.post("", response_model=ArticleResponse, status_code=status.HTTP_201_CREATED)
async def create_article(
    article_data: ArticleCreate,
    db: Db,
    access: Annotated[AccessContext, Depends(require_permission("news", "create"))]
):
    """
    Create an article.
    
    Raises:
        ValidationError: invalid visibility, or one excluding the author's own branch
        NotAuthorizedError: publishing without news.manage
    """
    if article_data.status == ArticleStatus.PUBLISHED:
        access.require("news", "manage")
    policy = await policy_for_write(db, access.actor, article_data.visibility, article_data.target_branch_ids)
    article = Article(
        **article_data.model_dump(exclude={"visibility", "target_branch_ids"}),
        slug=await service.unique_slug(db, article_data.title),
        author_id=access.actor.id
    )
    article.apply_visibility(policy)
    service.mark_published(article)
    db.add(article)
    await db.commit()
    await db.refresh(article)
    log.info("Actor %s created article %s (%s)", access.actor.id, article.id, policy.mode.value)
    return article


@router.patch("/{article_id}", response_model=ArticleResponse)
async def update_article(
    article_id: str,
    article_update: ArticleUpdate,
    db: Db,
    access: Annotated[AccessContext, Depends(require_permission("news", "edit"))]
):
    """Update an article visible to the current actor."""
    article = access.ensure_visible(await db.get(Article, article_id), "Article")
    if article_update.status == ArticleStatus.PUBLISHED and article.status != ArticleStatus.PUBLISHED:
        access.require("news", "manage")
    changes = article_update.model_dump(exclude_unset=True, exclude={"visibility", "target_branch_ids"})

    policy = await policy_for_update(
        db,
        access.actor,
        article.visibility_policy,
        article_update.visibility,
        article_update.target_branch_ids
    )
    if policy is not None:
        article.apply_visibility(policy)

    title = changes.get("title")
    if title and title != article.title:
        article.slug = await service.unique_slug(db, title, exclude_id=article.id)
    for key, value in changes.items():
        if value is not None:
            setattr(article, key, value)
    service.mark_published(article)

    await db.commit()
    await db.refresh(article)
    return article


@router.delete("/{article_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_article(
    article_id: str,
    db: Db,
    access: Annotated[AccessContext, Depends(require_permission("news", "delete"))]
):
    """Delete an article visible to the current actor."""
    article = access.ensure_visible(await db.get(Article, article_id), "Article")
    await db.delete(article)
    await db.commit()
    log.info("Actor %s deleted article %s", access.actor.id, article_id)
    return None
