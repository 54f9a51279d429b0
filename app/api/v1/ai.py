from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from langchain_core.language_models import BaseChatModel
from langchain_core.messages import BaseMessage
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user, get_db_session, get_llm
from app.models.user import User
from app.schemas.chat import ChatRequest, ChatResponse, QuickQuestionRequest
from app.services.assistant import (
    CHAT_FAILURE_REPLY,
    build_chat_conversation,
    generate_reply,
)
from app.services.knowledge import format_articles, search_articles
from app.utils.logging_config import logger

router = APIRouter()


async def _answer(
    llm: BaseChatModel, conversation: list[BaseMessage], source: str
) -> ChatResponse | JSONResponse:
    try:
        reply = await generate_reply(llm, conversation)
    except Exception as e:
        logger.error(f"AI {source} error: {e}", exc_info=True)
        return JSONResponse(
            status_code=500, content={"response": CHAT_FAILURE_REPLY}
        )
    return ChatResponse(response=reply)


@router.post("/chat", response_model=ChatResponse)
async def chat(
    payload: ChatRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
    llm: BaseChatModel = Depends(get_llm),
):
    """
    Ad-hoc conversation with the assistant. The client keeps the history and
    sends it with every message; nothing is stored.
    """
    articles = await search_articles(db, payload.message)
    conversation = build_chat_conversation(
        payload.message, payload.messages, format_articles(articles)
    )
    return await _answer(llm, conversation, source="chat")


@router.post("/quick-response", response_model=ChatResponse)
async def quick_response(
    payload: QuickQuestionRequest,
    db: AsyncSession = Depends(get_db_session),
    llm: BaseChatModel = Depends(get_llm),
):
    """
    Single question from the public landing page; no account needed.
    """
    articles = await search_articles(db, payload.message)
    conversation = build_chat_conversation(
        payload.message, [], format_articles(articles)
    )
    return await _answer(llm, conversation, source="quick-response")
