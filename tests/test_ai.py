import pytest
from langchain_core.messages import AIMessage, HumanMessage, SystemMessage

from app.services.assistant import CHAT_FAILURE_REPLY, SUPPORT_PROMPT


@pytest.mark.asyncio
async def test_chat_uses_history_and_knowledge(login_as, llm, seed_articles):
    await seed_articles(
        [{"title": "Billing FAQ", "content": "Charged on the 1st.", "tags": ["billing"]}]
    )
    client = await login_as("user@example.com")

    response = await client.post(
        "/api/v1/ai/chat",
        json={
            "message": "When is billing?",
            "messages": [
                {"role": "user", "content": "Hi"},
                {"role": "assistant", "content": "Hello!"},
            ],
        },
    )

    assert response.status_code == 200
    assert response.json() == {"response": llm.reply}

    conversation = llm.calls[0]
    assert conversation[0] == SystemMessage(content=SUPPORT_PROMPT)
    assert "Billing FAQ:\nCharged on the 1st." in conversation[1].content
    assert [type(m) for m in conversation[2:]] == [HumanMessage, AIMessage, HumanMessage]
    assert conversation[-1].content == "When is billing?"


@pytest.mark.asyncio
async def test_chat_requires_login(client):
    response = await client.post("/api/v1/ai/chat", json={"message": "hi", "messages": []})
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_chat_requires_message_and_history(login_as):
    client = await login_as("user@example.com")

    response = await client.post("/api/v1/ai/chat", json={"message": "hi"})
    assert response.status_code == 400

    response = await client.post("/api/v1/ai/chat", json={"message": "", "messages": []})
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_chat_failure_returns_apology(login_as, llm):
    client = await login_as("user@example.com")
    llm.error = ConnectionError("no route to host")

    response = await client.post("/api/v1/ai/chat", json={"message": "hi", "messages": []})

    assert response.status_code == 500
    assert response.json() == {"response": CHAT_FAILURE_REPLY}


@pytest.mark.asyncio
async def test_quick_response_is_public_and_single_turn(client, llm):
    response = await client.post("/api/v1/ai/quick-response", json={"message": "What can you do?"})

    assert response.status_code == 200
    assert response.json() == {"response": llm.reply}
    assert [type(m) for m in llm.calls[0]] == [SystemMessage, HumanMessage]


@pytest.mark.asyncio
async def test_quick_response_failure(client, llm):
    llm.error = RuntimeError("boom")
    response = await client.post("/api/v1/ai/quick-response", json={"message": "hello"})
    assert response.status_code == 500
    assert response.json()["response"] == CHAT_FAILURE_REPLY
