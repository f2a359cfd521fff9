from typing import List, Optional

from .expense import CamelModel


class ChatHistoryItem(CamelModel):
    role: str = ""
    content: str = ""


class ChatRequest(CamelModel):
    message: str = ""
    history: Optional[List[ChatHistoryItem]] = None


class ChatResponse(CamelModel):
    success: bool
    message: str
    is_configured: bool


class ChatStatusResponse(CamelModel):
    is_configured: bool
    message: str
