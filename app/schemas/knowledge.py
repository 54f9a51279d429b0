"""Pydantic schemas for knowledge base articles."""

import uuid
from datetime import datetime
from typing import Annotated, List, Optional

from pydantic import BaseModel, Field, StringConstraints

from app.models.knowledge import KnowledgeCategory

Title = Annotated[
    str, StringConstraints(strip_whitespace=True, min_length=1, max_length=100)
]
Content = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


class ArticleCreateRequest(BaseModel):
    title: Title
    content: Content
    category: KnowledgeCategory
    tags: List[str] = Field(default_factory=list)


class ArticleUpdateRequest(BaseModel):
    title: Optional[Title] = None
    content: Optional[Content] = None
    category: Optional[KnowledgeCategory] = None
    tags: Optional[List[str]] = None


class ArticleResponse(BaseModel):
    id: uuid.UUID
    title: str
    content: str
    category: KnowledgeCategory
    tags: List[str]
    created_by_id: uuid.UUID
    updated_by_id: Optional[uuid.UUID] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class ArticleListResponse(BaseModel):
    articles: List[ArticleResponse]


class ArticleDetailResponse(BaseModel):
    article: ArticleResponse
