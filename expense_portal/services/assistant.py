"""Conversational assistant over the expense data.

When no hosted model is configured the assistant answers with canned demo
text. Otherwise it runs a bounded tool-calling loop: the model may ask for
``get_expenses`` results up to ``MAX_TOOL_ITERATIONS`` times before it must
produce a final answer.
"""

from __future__ import annotations
import json
import logging
from typing import Any, Dict, List, Optional, Sequence

from expense_portal.core.config import Settings
from expense_portal.core.errors import AppError
from expense_portal.models import ChatHistoryItem, ChatRole, Expense
from .chat_backend import ChatBackend, Message, build_azure_backend
from .expense_service import ExpenseService

logger = logging.getLogger("app.chat")

MAX_TOOL_ITERATIONS = 5

UNABLE_TO_COMPLETE_REPLY = (
    "I apologize, but I was unable to complete your request. Please try again."
)

SYSTEM_PROMPT = """You are a helpful assistant for the Expense Management System. You can help users:
- View their expenses
- Understand expense statuses (Draft, Submitted, Approved, Rejected)
- Filter expenses by category or status
- Explain how the expense approval process works

When listing expenses, format them nicely with:
- Description
- Amount in GBP (£)
- Category
- Status
- Date

Use the get_expenses function to retrieve real data from the database.
Always be helpful and provide clear, formatted responses.
When showing lists, use bullet points or numbered lists for clarity."""

GET_EXPENSES_TOOL: Dict[str, Any] = {
    "type": "function",
    "function": {
        "name": "get_expenses",
        "description": "Retrieves expenses from the database with optional filtering",
        "parameters": {
            "type": "object",
            "properties": {
                "filter": {
                    "type": "string",
                    "description": "Optional text filter for expense description or category",
                },
                "status": {
                    "type": "string",
                    "description": "Optional status filter: Draft, Submitted, Approved, or Rejected",
                },
            },
        },
    },
}

EXPENSE_KEYWORDS = ("expense", "list", "show")

DEMO_MODE_EXPENSES_REPLY = """**Demo Mode - GenAI Services Not Deployed**

To enable AI-powered chat functionality, deploy an Azure OpenAI resource and set:
1. `OPENAI_ENDPOINT` to the resource endpoint
2. `OPENAI_DEPLOYMENT_NAME` to the chat model deployment
3. `OPENAI_API_KEY`, or grant the app's managed identity access to the resource

Once deployed, you'll be able to:
- Ask questions about your expenses in natural language
- Get summaries and insights
- Filter and search expenses using conversational queries

For now, please use the Expenses and Approve pages to manage expenses directly."""

DEMO_MODE_WELCOME_REPLY = """**Welcome to the Expense Management Chat!**

I'm currently running in demo mode because GenAI services haven't been deployed yet.

To enable full AI capabilities:
1. Deploy Azure OpenAI and set `OPENAI_ENDPOINT` and `OPENAI_DEPLOYMENT_NAME`
2. Restart the application; the chat will connect to the model automatically

In the meantime, you can:
- Navigate to the **Expenses** page to view all expenses
- Use the **Add Expense** page to create new expenses
- Go to **Approve** to review pending expenses"""


def placeholder_reply(message: str) -> str:
    lowered = message.lower()
    if any(keyword in lowered for keyword in EXPENSE_KEYWORDS):
        return DEMO_MODE_EXPENSES_REPLY
    return DEMO_MODE_WELCOME_REPLY


def expense_summary(expense: Expense) -> Dict[str, Any]:
    return {
        "expenseId": expense.expense_id,
        "description": expense.description,
        "formattedAmount": expense.formatted_amount,
        "categoryName": expense.category_name,
        "statusName": expense.status_name,
        "date": expense.expense_date.strftime("%d/%m/%Y"),
        "userName": expense.user_name,
    }


def _text_arg(args: Dict[str, Any], name: str) -> Optional[str]:
    value = args.get(name)
    if value is None or isinstance(value, str):
        return value
    raise ValueError(f"Argument '{name}' must be a string")


class ExpenseAssistant:
    def __init__(self, expense_service: ExpenseService, backend: Optional[ChatBackend] = None):
        self.expense_service = expense_service
        self.backend = backend

    @property
    def is_configured(self) -> bool:
        return self.backend is not None

    def build_messages(
        self, message: str, history: Optional[Sequence[ChatHistoryItem]] = None
    ) -> List[Message]:
        messages: List[Message] = [{"role": "system", "content": SYSTEM_PROMPT}]
        for item in history or ():
            role = ChatRole.parse(item.role)
            if role is None:
                continue
            messages.append({"role": role.value, "content": item.content})
        messages.append({"role": ChatRole.USER.value, "content": message})
        return messages

    def execute_tool(self, name: str, arguments: str) -> str:
        logger.info("executing function %s with args %s", name, arguments)
        if name != "get_expenses":
            return json.dumps({"error": f"Unknown function: {name}"})
        try:
            args = json.loads(arguments) if arguments else {}
            if not isinstance(args, dict):
                args = {}
            expenses = self.expense_service.list_expenses(
                filter=_text_arg(args, "filter"), status=_text_arg(args, "status")
            )
        except (ValueError, AppError) as exc:
            logger.error("error executing function %s: %s", name, exc)
            return json.dumps({"error": str(exc)})
        return json.dumps([expense_summary(e) for e in expenses], ensure_ascii=False)

    async def respond(
        self, message: str, history: Optional[Sequence[ChatHistoryItem]] = None
    ) -> str:
        if self.backend is None:
            return placeholder_reply(message)
        try:
            return await self._run_tool_loop(self.backend, message, history)
        except Exception as exc:
            logger.exception("error getting chat response")
            return f"I encountered an error: {exc}. Please try again later."

    async def _run_tool_loop(
        self,
        backend: ChatBackend,
        message: str,
        history: Optional[Sequence[ChatHistoryItem]],
    ) -> str:
        messages = self.build_messages(message, history)
        tools = [GET_EXPENSES_TOOL]
        for iteration in range(1, MAX_TOOL_ITERATIONS + 1):
            turn = await backend.send(messages, tools)
            if not turn.requests_tools:
                if not turn.content:
                    logger.warning("model returned an empty final turn")
                    return UNABLE_TO_COMPLETE_REPLY
                return turn.content
            logger.debug(
                "iteration %s: model requested %s tool call(s)",
                iteration,
                len(turn.tool_calls),
            )
            messages.append(turn.as_message())
            for call in turn.tool_calls:
                messages.append(
                    {
                        "role": "tool",
                        "tool_call_id": call.id,
                        "content": self.execute_tool(call.name, call.arguments),
                    }
                )
        logger.warning("tool loop exhausted after %s iterations", MAX_TOOL_ITERATIONS)
        return UNABLE_TO_COMPLETE_REPLY


def build_assistant(settings: Settings, expense_service: ExpenseService) -> ExpenseAssistant:
    if not settings.chat_configured:
        logger.warning(
            "Azure OpenAI not configured. Chat will return placeholder responses."
        )
        return ExpenseAssistant(expense_service)
    try:
        backend = build_azure_backend(settings)
    except Exception:
        logger.exception("failed to initialize Azure OpenAI client")
        return ExpenseAssistant(expense_service)
    return ExpenseAssistant(expense_service, backend)
