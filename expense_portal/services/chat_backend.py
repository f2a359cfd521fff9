"""Hosted chat-completion backend.

The assistant only depends on the ``ChatBackend`` protocol: send the message
list and tool declarations, get back a ``ModelTurn`` that is either a final
answer or a set of tool requests. ``AzureOpenAIBackend`` implements it with the
openai SDK; tests substitute a scripted fake.
"""

from __future__ import annotations
from dataclasses import dataclass, field
import logging
from typing import Any, Dict, List, Optional, Protocol

import openai
from openai import AsyncAzureOpenAI
from azure.identity.aio import (
    DefaultAzureCredential,
    ManagedIdentityCredential,
    get_bearer_token_provider,
)

from expense_portal.core.config import Settings
from expense_portal.core.errors import AssistantError

logger = logging.getLogger("app.chat")

COGNITIVE_SERVICES_SCOPE = "https://cognitiveservices.azure.com/.default"

Message = Dict[str, Any]


@dataclass
class ToolCall:
    id: str
    name: str
    arguments: str = "{}"


@dataclass
class ModelTurn:
    content: Optional[str] = None
    tool_calls: List[ToolCall] = field(default_factory=list)

    @property
    def requests_tools(self) -> bool:
        return bool(self.tool_calls)

    def as_message(self) -> Message:
        """The assistant turn as it must be replayed to the model."""
        message: Message = {"role": "assistant", "content": self.content}
        if self.tool_calls:
            message["tool_calls"] = [
                {
                    "id": call.id,
                    "type": "function",
                    "function": {"name": call.name, "arguments": call.arguments},
                }
                for call in self.tool_calls
            ]
        return message


class ChatBackend(Protocol):
    async def send(self, messages: List[Message], tools: List[Dict[str, Any]]) -> ModelTurn: ...


class AzureOpenAIBackend:
    def __init__(self, client: AsyncAzureOpenAI, deployment: str):
        self.client = client
        self.deployment = deployment

    async def send(self, messages: List[Message], tools: List[Dict[str, Any]]) -> ModelTurn:
        try:
            completion = await self.client.chat.completions.create(
                model=self.deployment,
                messages=messages,  # type: ignore[arg-type]
                tools=tools,  # type: ignore[arg-type]
            )
        except openai.OpenAIError as exc:
            raise AssistantError(str(exc)) from exc
        if not completion.choices:
            raise AssistantError("The model returned no choices")
        message = completion.choices[0].message
        calls = [
            ToolCall(
                id=tc.id,
                name=tc.function.name,
                arguments=tc.function.arguments or "{}",
            )
            for tc in (message.tool_calls or [])
        ]
        return ModelTurn(content=message.content, tool_calls=calls)


def build_azure_backend(settings: Settings) -> AzureOpenAIBackend:
    """Create the Azure OpenAI backend from settings.

    An API key is used when configured; otherwise an Entra ID token is
    obtained from the managed identity (when a client id is given) or the
    default Azure credential chain.
    """
    if settings.openai_api_key:
        client = AsyncAzureOpenAI(
            azure_endpoint=settings.openai_endpoint,
            api_key=settings.openai_api_key,
            api_version=settings.openai_api_version,
        )
    else:
        if settings.managed_identity_client_id:
            logger.info(
                "using ManagedIdentityCredential with client id %s",
                settings.managed_identity_client_id,
            )
            credential = ManagedIdentityCredential(
                client_id=settings.managed_identity_client_id
            )
        else:
            logger.info("using DefaultAzureCredential")
            credential = DefaultAzureCredential()
        client = AsyncAzureOpenAI(
            azure_endpoint=settings.openai_endpoint,
            azure_ad_token_provider=get_bearer_token_provider(
                credential, COGNITIVE_SERVICES_SCOPE
            ),
            api_version=settings.openai_api_version,
        )
    logger.info("Azure OpenAI configured with endpoint %s", settings.openai_endpoint)
    return AzureOpenAIBackend(client, settings.openai_deployment_name or "")
