"""
Seed the database with starter accounts and knowledge base articles.

Run with `python -m app.scripts.seed_data`. Safe to run repeatedly: users are
matched by email and articles by title.
"""

import asyncio

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config.db import SessionLocal, engine, init_models
from app.models import KnowledgeArticle, KnowledgeCategory, User, UserRole
from app.utils.logging_config import logger
from app.utils.passwords import hash_password

SEED_PASSWORD = "password123"

SEED_USERS = [
    {"name": "Admin User", "email": "admin@example.com", "role": UserRole.ADMIN},
    {"name": "Regular User", "email": "user@example.com", "role": UserRole.USER},
]

SEED_ARTICLES = [
    {
        "title": "How to reset your password",
        "content": (
            'To reset your password, click on the "Forgot Password" link on the '
            "login page. You will receive an email with instructions to reset your "
            "password. Follow the link in the email and enter your new password."
        ),
        "category": KnowledgeCategory.GENERAL,
        "tags": ["password", "login", "account"],
    },
    {
        "title": "Billing FAQ",
        "content": (
            "Our billing cycle runs from the 1st to the last day of each month. You "
            "will be charged on the 1st day of each month for the upcoming month. If "
            "you upgrade or downgrade your plan mid-month, your bill will be "
            "prorated accordingly."
        ),
        "category": KnowledgeCategory.BILLING,
        "tags": ["billing", "payment", "subscription"],
    },
    {
        "title": "Technical troubleshooting guide",
        "content": (
            "If you are experiencing technical issues, please try the following "
            "steps:\n1. Clear your browser cache and cookies\n2. Try using a "
            "different browser\n3. Check your internet connection\n4. Disable any "
            "browser extensions\n5. Restart your computer\n\nIf you are still "
            "experiencing issues, please contact our support team."
        ),
        "category": KnowledgeCategory.TECHNICAL,
        "tags": ["troubleshooting", "technical", "issues"],
    },
]


async def upsert_user(session: AsyncSession, name: str, email: str, role: UserRole) -> User:
    user = await session.scalar(select(User).where(User.email == email))
    if user is None:
        user = User(email=email)
        session.add(user)
    user.name = name
    user.role = role
    user.password_hash = hash_password(SEED_PASSWORD)
    await session.flush()
    logger.info(f"User ready: {email} ({role.value})")
    return user


async def upsert_article(session: AsyncSession, author: User, **fields) -> KnowledgeArticle:
    article = await session.scalar(
        select(KnowledgeArticle).where(KnowledgeArticle.title == fields["title"])
    )
    if article is None:
        article = KnowledgeArticle(created_by_id=author.id, **fields)
        session.add(article)
    else:
        for key, value in fields.items():
            setattr(article, key, value)
        article.updated_by_id = author.id
    logger.info(f"Knowledge base article ready: {fields['title']}")
    return article


async def seed() -> None:
    await init_models()
    async with SessionLocal() as session:
        users = [await upsert_user(session, **spec) for spec in SEED_USERS]
        admin = users[0]
        for article in SEED_ARTICLES:
            await upsert_article(session, admin, **article)
        await session.commit()
    logger.info("Database initialization complete")


async def main() -> None:
    try:
        await seed()
    finally:
        await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
