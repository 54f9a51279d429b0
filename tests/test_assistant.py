import pytest
from langchain_core.messages import AIMessage, HumanMessage, SystemMessage

from app.models import Message, Ticket, TicketCategory, TicketPriority, TicketStatus
from app.schemas.chat import ChatTurn
from app.services.assistant import (
    EMPTY_COMPLETION,
    KNOWLEDGE_PREFIX,
    SUPPORT_PROMPT,
    build_chat_conversation,
    build_ticket_conversation,
    generate_reply,
)


def make_ticket() -> Ticket:
    return Ticket(
        title="Printer on fire",
        description="Smoke everywhere",
        category=TicketCategory.TECHNICAL,
        priority=TicketPriority.URGENT,
        status=TicketStatus.IN_PROGRESS,
    )


def thread(*entries: tuple[str, bool]) -> list[Message]:
    return [
        Message(position=i, content=content, is_ai=is_ai)
        for i, (content, is_ai) in enumerate(entries)
    ]


def test_ticket_conversation_drops_just_saved_message():
    messages = thread(
        ("Smoke everywhere", False),
        ("Please unplug it.", True),
        ("It is unplugged", False),
    )

    conversation = build_ticket_conversation(make_ticket(), "It is unplugged", messages)

    assert [type(m) for m in conversation] == [
        SystemMessage,
        HumanMessage,
        AIMessage,
        HumanMessage,
    ]
    assert [m.content for m in conversation[1:]] == [
        "Smoke everywhere",
        "Please unplug it.",
        "It is unplugged",
    ]


def test_ticket_context_describes_ticket():
    conversation = build_ticket_conversation(
        make_ticket(), "hi", thread(("Smoke everywhere", False), ("hi", False))
    )

    system = conversation[0].content
    assert system.startswith("You are a helpful support assistant.")
    assert (
        "Ticket Title: Printer on fire\n"
        "Description: Smoke everywhere\n"
        "Category: technical\n"
        "Priority: urgent\n"
        "Status: in-progress"
    ) in system


def test_knowledge_follows_ticket_context():
    knowledge = ["Fire safety:\nUse an extinguisher.", "Printers:\nDo not burn."]
    conversation = build_ticket_conversation(
        make_ticket(), "help", thread(("Smoke everywhere", False), ("help", False)), knowledge
    )

    assert len(conversation) == 4
    assert "Ticket Title" in conversation[0].content
    assert isinstance(conversation[1], SystemMessage)
    assert conversation[1].content == (
        KNOWLEDGE_PREFIX
        + "Fire safety:\nUse an extinguisher.\n\nPrinters:\nDo not burn."
    )
    assert conversation[-1] == HumanMessage(content="help")


def test_no_knowledge_means_no_knowledge_message():
    conversation = build_ticket_conversation(
        make_ticket(), "help", thread(("help", False)), []
    )
    assert [type(m) for m in conversation] == [SystemMessage, HumanMessage]


def test_chat_conversation_maps_roles():
    history = [
        ChatTurn(role="user", content="Hi"),
        ChatTurn(role="assistant", content="Hello! How can I help?"),
    ]

    conversation = build_chat_conversation("Where is my invoice?", history, ["Billing FAQ:\nMonthly."])

    assert conversation[0] == SystemMessage(content=SUPPORT_PROMPT)
    assert conversation[1].content.startswith(KNOWLEDGE_PREFIX)
    assert [type(m) for m in conversation[2:]] == [HumanMessage, AIMessage, HumanMessage]
    assert conversation[-1].content == "Where is my invoice?"


class StaticModel:
    def __init__(self, content):
        self.content = content

    async def ainvoke(self, messages):
        return AIMessage(content=self.content)


@pytest.mark.asyncio
async def test_generate_reply_strips_and_defaults():
    assert await generate_reply(StaticModel("  Sure thing. \n"), []) == "Sure thing."
    assert await generate_reply(StaticModel(""), []) == EMPTY_COMPLETION


@pytest.mark.asyncio
async def test_generate_reply_joins_content_parts():
    model = StaticModel([{"type": "text", "text": "Part one. "}, "Part two."])
    assert await generate_reply(model, []) == "Part one. Part two."


@pytest.mark.asyncio
async def test_generate_reply_propagates_errors():
    class Broken:
        async def ainvoke(self, messages):
            raise TimeoutError("upstream timed out")

    with pytest.raises(TimeoutError):
        await generate_reply(Broken(), [])
