"""
Keyword search over knowledge base articles.

Candidates are narrowed in SQL with case-insensitive substring matches on
title, content and tags, then ranked in Python by weighted term hits.
"""

import re
from typing import Optional, Sequence

from sklearn.feature_extraction.text import ENGLISH_STOP_WORDS
from sqlalchemy import String, cast, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.knowledge import KnowledgeArticle, KnowledgeCategory
from app.settings import settings

TITLE_WEIGHT = 3
TAG_WEIGHT = 2
CONTENT_WEIGHT = 1

_WORD_RE = re.compile(r"\w+")


def extract_terms(query: str) -> list[str]:
    """Lowercase words of the query without stop words, deduplicated in order."""
    terms: list[str] = []
    for word in _WORD_RE.findall(query.lower()):
        if len(word) < 2 or word in ENGLISH_STOP_WORDS or word in terms:
            continue
        terms.append(word)
    return terms


def score_article(article: KnowledgeArticle, terms: Sequence[str]) -> int:
    title = article.title.lower()
    content = article.content.lower()
    tags = [tag.lower() for tag in article.tags or []]

    score = 0
    for term in terms:
        if term in title:
            score += TITLE_WEIGHT
        if any(term in tag for tag in tags):
            score += TAG_WEIGHT
        if term in content:
            score += CONTENT_WEIGHT
    return score


async def search_articles(
    db: AsyncSession,
    query: str,
    limit: int | None = None,
    category: Optional[KnowledgeCategory] = None,
) -> list[KnowledgeArticle]:
    """
    Return at most `limit` articles matching the query, best match first.

    Args:
        db (AsyncSession): The database session.
        query (str): Free text, usually the user's latest message.
        limit (int | None): Maximum number of articles, defaults to
            `settings.MAX_KNOWLEDGE_ARTICLES`.
        category (KnowledgeCategory | None): Only search articles of this
            category.
    """
    if limit is None:
        limit = settings.MAX_KNOWLEDGE_ARTICLES
    terms = extract_terms(query)
    if not terms or limit <= 0:
        return []

    conditions = []
    for term in terms:
        pattern = f"%{term}%"
        conditions.extend(
            [
                KnowledgeArticle.title.ilike(pattern),
                KnowledgeArticle.content.ilike(pattern),
                cast(KnowledgeArticle.tags, String).ilike(pattern),
            ]
        )

    stmt = (
        select(KnowledgeArticle)
        .where(or_(*conditions))
        .order_by(KnowledgeArticle.created_at.desc())
    )
    if category:
        stmt = stmt.where(KnowledgeArticle.category == category)
    candidates = (await db.scalars(stmt)).all()

    ranked = []
    for article in candidates:
        score = score_article(article, terms)
        if score > 0:
            ranked.append((score, article))
    # sort is stable, so ties keep the newer article first
    ranked.sort(key=lambda item: item[0], reverse=True)
    return [article for _, article in ranked[:limit]]


def format_articles(articles: Sequence[KnowledgeArticle]) -> list[str]:
    return [article.as_context() for article in articles]
