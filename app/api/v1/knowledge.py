"""API endpoints for the knowledge base the assistant draws on."""

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user, get_db_session, require_admin
from app.models.knowledge import KnowledgeArticle, KnowledgeCategory
from app.models.user import User
from app.schemas.knowledge import (
    ArticleCreateRequest,
    ArticleDetailResponse,
    ArticleListResponse,
    ArticleResponse,
    ArticleUpdateRequest,
)
from app.services.knowledge import search_articles
from app.utils.logging_config import logger

router = APIRouter()


async def get_article_or_404(db: AsyncSession, article_id: uuid.UUID) -> KnowledgeArticle:
    article = await db.get(KnowledgeArticle, article_id)
    if not article:
        raise HTTPException(status.HTTP_404_NOT_FOUND, "Article not found")
    return article


@router.get("", response_model=ArticleListResponse)
async def list_articles(
    q: Optional[str] = None,
    category: Optional[KnowledgeCategory] = None,
    _: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    """
    With `q`, run the same keyword search the assistant uses; otherwise list
    articles newest first.
    """
    if q:
        articles = await search_articles(db, q, category=category)
    else:
        query = select(KnowledgeArticle).order_by(KnowledgeArticle.created_at.desc())
        if category:
            query = query.where(KnowledgeArticle.category == category)
        articles = (await db.scalars(query)).all()
    return ArticleListResponse(
        articles=[ArticleResponse.model_validate(a) for a in articles]
    )


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=ArticleDetailResponse,
    summary="Create a knowledge base article",
)
async def create_article(
    payload: ArticleCreateRequest,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
):
    article = KnowledgeArticle(
        title=payload.title,
        content=payload.content,
        category=payload.category,
        tags=[tag.strip() for tag in payload.tags if tag.strip()],
        created_by_id=admin.id,
    )
    db.add(article)
    await db.commit()
    logger.info(f"Knowledge article {article.id} created by {admin.id}")
    return ArticleDetailResponse(article=ArticleResponse.model_validate(article))


@router.put("/{article_id}", response_model=ArticleDetailResponse)
async def update_article(
    article_id: uuid.UUID,
    payload: ArticleUpdateRequest,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
):
    article = await get_article_or_404(db, article_id)
    changes = payload.model_dump(exclude_unset=True, exclude_none=True)
    if "tags" in changes:
        changes["tags"] = [tag.strip() for tag in changes["tags"] if tag.strip()]
    for field, value in changes.items():
        setattr(article, field, value)
    article.updated_by_id = admin.id
    await db.commit()
    await db.refresh(article)
    return ArticleDetailResponse(article=ArticleResponse.model_validate(article))


@router.delete("/{article_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_article(
    article_id: uuid.UUID,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
):
    article = await get_article_or_404(db, article_id)
    await db.delete(article)
    await db.commit()
    logger.info(f"Knowledge article {article_id} deleted by {admin.id}")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
