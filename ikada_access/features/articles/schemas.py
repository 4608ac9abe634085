"""
Pydantic schemas for article requests and responses.
"""
from datetime import datetime
from pydantic import BaseModel, Field

from ikada_access.features.articles.models import ArticleStatus
from ikada_access.features.tenancy.schemas import VisibilityFields, VisibilityUpdate


class ArticleBase(BaseModel):
    """Base article schema."""
    title: str = Field(..., min_length=1, max_length=255)
    excerpt: str | None = Field(None, max_length=500)
    content: str = Field(..., min_length=1)
    status: ArticleStatus = ArticleStatus.DRAFT


class ArticleCreate(ArticleBase, VisibilityFields):
    """Schema for creating an article."""
    pass


class ArticleUpdate(VisibilityUpdate):
    """Schema for updating an article. Omitted fields keep their value."""
    title: str | None = Field(None, min_length=1, max_length=255)
    excerpt: str | None = Field(None, max_length=500)
    content: str | None = Field(None, min_length=1)
    status: ArticleStatus | None = None


class ArticleResponse(ArticleBase, VisibilityFields):
    """Schema for article responses."""
    id: str
    slug: str
    author_id: str | None
    published_at: datetime | None
    created_at: datetime
    updated_at: datetime
    
    model_config = {"from_attributes": True}


class ArticleListResponse(BaseModel):
    """A page of the articles visible to the caller."""
    items: list[ArticleResponse]
    total: int
    skip: int
    limit: int
