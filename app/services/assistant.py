"""
Conversation assembly and completion calls for the support assistant.
"""

import threading
from typing import Optional, Sequence

from langchain_core.language_models import BaseChatModel
from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage
from langchain_google_genai import ChatGoogleGenerativeAI

from app.models.message import Message
from app.models.ticket import Ticket
from app.schemas.chat import ChatTurn
from app.settings import settings
from app.utils.logging_config import logger

SUPPORT_PROMPT = (
    "You are a helpful support assistant. Provide clear, concise, "
    "and accurate responses to customer inquiries."
)
KNOWLEDGE_PREFIX = "Here is some relevant information that might help you respond:\n"
EMPTY_COMPLETION = "I could not generate a response."
CHAT_FAILURE_REPLY = (
    "I apologize, but I encountered an error while processing your request. "
    "Please try again later."
)


class ChatModelService:
    _model: Optional[BaseChatModel] = None
    _lock: threading.Lock = threading.Lock()

    @classmethod
    def get_model(cls) -> BaseChatModel:
        """
        Get the shared chat model, creating it on first use.
        """
        if cls._model is None:
            with cls._lock:
                if cls._model is None:
                    logger.info(f"Initializing chat model ({settings.LLM_MODEL})...")
                    cls._model = ChatGoogleGenerativeAI(
                        model=settings.LLM_MODEL,
                        temperature=settings.LLM_TEMPERATURE,
                        max_output_tokens=settings.LLM_MAX_TOKENS,
                        google_api_key=settings.GOOGLE_API_KEY,
                    )
        return cls._model


def get_chat_model() -> BaseChatModel:
    return ChatModelService.get_model()


def describe_ticket(ticket: Ticket) -> str:
    return (
        f"Ticket Title: {ticket.title}\n"
        f"Description: {ticket.description}\n"
        f"Category: {ticket.category.value}\n"
        f"Priority: {ticket.priority.value}\n"
        f"Status: {ticket.status.value}"
    )


def knowledge_message(knowledge: Sequence[str]) -> SystemMessage:
    return SystemMessage(content=KNOWLEDGE_PREFIX + "\n\n".join(knowledge))


def with_knowledge(
    messages: list[BaseMessage], knowledge: Sequence[str]
) -> list[BaseMessage]:
    """Insert the knowledge system message right after the leading system prompt."""
    if not knowledge:
        return messages
    return [messages[0], knowledge_message(knowledge), *messages[1:]]


def thread_to_history(thread: Sequence[Message]) -> list[BaseMessage]:
    return [
        AIMessage(content=message.content)
        if message.is_ai
        else HumanMessage(content=message.content)
        for message in thread
    ]


def build_ticket_conversation(
    ticket: Ticket,
    content: str,
    thread: Sequence[Message],
    knowledge: Sequence[str] = (),
) -> list[BaseMessage]:
    """
    Build the message list sent to the completion API for a ticket reply.

    `thread` is the ticket's messages in order and already ends with the
    message just saved for `content`; that entry is dropped so the new
    message only appears once, as the final user turn.

    Args:
        ticket (Ticket): The ticket being answered.
        content (str): The new user message.
        thread (Sequence[Message]): The full ticket thread.
        knowledge (Sequence[str]): Formatted knowledge base articles.

    Returns:
        list[BaseMessage]: system prompt, optional knowledge, history, user turn.
    """
    history = thread_to_history(thread)[:-1]
    messages: list[BaseMessage] = [
        SystemMessage(
            content="You are a helpful support assistant. You are responding to "
            "a support ticket with the following context:\n" + describe_ticket(ticket)
        ),
        *history,
        HumanMessage(content=content),
    ]
    return with_knowledge(messages, knowledge)


def build_chat_conversation(
    message: str, history: Sequence[ChatTurn], knowledge: Sequence[str] = ()
) -> list[BaseMessage]:
    messages: list[BaseMessage] = [SystemMessage(content=SUPPORT_PROMPT)]
    for turn in history:
        if turn.role == "assistant":
            messages.append(AIMessage(content=turn.content))
        else:
            messages.append(HumanMessage(content=turn.content))
    messages.append(HumanMessage(content=message))
    return with_knowledge(messages, knowledge)


async def generate_reply(llm: BaseChatModel, messages: list[BaseMessage]) -> str:
    """
    Call the completion API and return the reply text.

    Errors from the model propagate; callers decide whether a failure is fatal.
    """
    logger.info(f"Requesting completion with {len(messages)} messages")
    response = await llm.ainvoke(messages)
    content = response.content
    if isinstance(content, list):
        # Gemini may answer with content parts
        content = "".join(
            part if isinstance(part, str) else part.get("text", "")
            for part in content
        )
    content = content.strip()
    return content or EMPTY_COMPLETION
