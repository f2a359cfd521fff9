import logging

from fastapi import APIRouter, Depends

from expense_portal.dependencies import get_assistant
from expense_portal.models import ChatRequest, ChatResponse, ChatStatusResponse
from expense_portal.services.assistant import ExpenseAssistant

router = APIRouter(prefix="/api/chat", tags=["chat"])

logger = logging.getLogger("app.api.chat")

CONFIGURED_MESSAGE = "Azure OpenAI is configured and ready"
NOT_CONFIGURED_MESSAGE = (
    "Azure OpenAI is not configured. Set OPENAI_ENDPOINT and "
    "OPENAI_DEPLOYMENT_NAME to enable AI features."
)


@router.post("", response_model=ChatResponse, summary="Send a chat message")
async def chat(
    payload: ChatRequest,
    assistant: ExpenseAssistant = Depends(get_assistant),
):
    """Always answers 200; failures are reported in ``message``."""
    logger.info("chat request received: %s", payload.message)
    try:
        reply = await assistant.respond(payload.message, payload.history)
    except Exception as exc:
        logger.exception("error processing chat request")
        return ChatResponse(
            success=False,
            message=f"An error occurred: {exc}",
            is_configured=assistant.is_configured,
        )
    return ChatResponse(success=True, message=reply, is_configured=assistant.is_configured)


@router.get("/status", response_model=ChatStatusResponse)
async def chat_status(assistant: ExpenseAssistant = Depends(get_assistant)):
    return ChatStatusResponse(
        is_configured=assistant.is_configured,
        message=CONFIGURED_MESSAGE if assistant.is_configured else NOT_CONFIGURED_MESSAGE,
    )
