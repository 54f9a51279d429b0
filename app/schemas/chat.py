from typing import Annotated, List, Literal

from pydantic import BaseModel, StringConstraints

NonBlank = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


class ChatTurn(BaseModel):
    role: Literal["user", "assistant"]
    content: str


class ChatRequest(BaseModel):
    message: NonBlank
    messages: List[ChatTurn]


class QuickQuestionRequest(BaseModel):
    message: NonBlank


class ChatResponse(BaseModel):
    response: str
