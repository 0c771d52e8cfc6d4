"""
Sales Agent Service - one chat turn through the tool-calling loop.

    phone + text -> tenant context -> system prompt + history + message
        -> model turn -> tool calls executed in order -> ToolMessages
        -> ... until the model answers in text or MAX_STEPS is reached
"""
import json
import logging
from typing import Any, Dict, List, Tuple

from django.conf import settings
from langchain_core.messages import AIMessage, HumanMessage, SystemMessage, ToolMessage

from agent.context import ToolContext
from agent.conversation_store import ConversationStore
from agent.llm import get_chat_model
from agent.prompts import (
    build_system_prompt, TENANT_NOT_FOUND_REPLY, STEP_LIMIT_REPLY, EMPTY_REPLY,
)
from agent.tools import invoke_tool, tool_definitions
from directory.services import TenantResolver, normalize_phone
from stock.services.base_service import (
    success_response, ValidationError, TenantResolutionError,
)

logger = logging.getLogger(__name__)

MIN_MESSAGE_LENGTH = 2


def message_text(content: Any) -> str:
    """AIMessage content is either a string or a list of content blocks"""
    if isinstance(content, str):
        return content.strip()
    if isinstance(content, list):
        parts = []
        for block in content:
            if isinstance(block, str):
                parts.append(block)
            elif isinstance(block, dict) and block.get("type") == "text":
                parts.append(block.get("text", ""))
        return "".join(parts).strip()
    return ""


class SalesAgentService:

    @staticmethod
    def session_id_for(distributor_id: int, phone_number: str) -> str:
        return f"{distributor_id}:{normalize_phone(phone_number)}"

    @classmethod
    def build_messages(cls, system_prompt: str, history: List[Dict[str, str]], text: str) -> list:
        messages = [SystemMessage(content=system_prompt)]
        for entry in history:
            if entry.get("role") == "user":
                messages.append(HumanMessage(content=entry["content"]))
            elif entry.get("role") == "assistant":
                messages.append(AIMessage(content=entry["content"]))
        messages.append(HumanMessage(content=text))
        return messages

    @classmethod
    def run_loop(cls, model, messages: list, context: ToolContext) -> Tuple[str, int, List[Dict[str, Any]]]:
        """
        Alternate model turns and tool executions. Returns the reply, the
        number of model turns used and a summary of the executed tool calls.
        """
        max_steps = settings.AGENT["MAX_STEPS"]
        partial = ""
        executed = []

        for step in range(1, max_steps + 1):
            response = model.invoke(messages)
            messages.append(response)

            text = message_text(response.content)
            if text:
                partial = text

            tool_calls = getattr(response, "tool_calls", None) or []
            if not tool_calls:
                return text or partial or EMPTY_REPLY, step, executed

            for call in tool_calls:
                result = invoke_tool(call["name"], call.get("args"), context)
                executed.append({
                    "name": call["name"],
                    "args": call.get("args") or {},
                    "success": bool(result.get("success")),
                    "error_code": result.get("error_code"),
                })
                messages.append(ToolMessage(
                    content=json.dumps(result, ensure_ascii=False, default=str),
                    tool_call_id=call.get("id") or call["name"],
                ))

        logger.warning(f"Agent stopped after {max_steps} steps (session {context.session_id})")
        return partial or STEP_LIMIT_REPLY, max_steps, executed

    @classmethod
    def run(cls, phone_number: str, text: str, llm=None, distributor_id: int = None) -> Dict[str, Any]:
        text = (text or "").strip()
        if len(text) < MIN_MESSAGE_LENGTH:
            raise ValidationError("The message is too short", "text")

        try:
            tenant = TenantResolver.resolve_phone(phone_number, distributor_id)
        except TenantResolutionError as e:
            logger.warning(f"Chat from unresolved phone {phone_number}: {e.message}")
            return success_response({
                "reply": TENANT_NOT_FOUND_REPLY,
                "resolved": False,
                "tool_calls": [],
            })

        session_id = cls.session_id_for(tenant.distributor_id, phone_number)
        context = ToolContext.from_tenant(tenant, session_id)
        store = ConversationStore()

        messages = cls.build_messages(
            build_system_prompt(tenant.mode, tenant.distributor_name, tenant.display_name),
            store.get(session_id),
            text,
        )

        try:
            model = llm or get_chat_model()
            if hasattr(model, "bind_tools"):
                model = model.bind_tools(tool_definitions(context.toolset))
            reply, steps, executed = cls.run_loop(model, messages, context)
        except Exception:
            logger.exception(f"Agent turn failed (session {session_id})")
            raise

        store.append(session_id, "user", text)
        store.append(session_id, "assistant", reply)

        logger.info(f"Agent turn done (session {session_id}, {steps} steps, {len(executed)} tool calls)")
        return success_response({
            "reply": reply,
            "resolved": True,
            "mode": tenant.mode,
            "session_id": session_id,
            "steps": steps,
            "tool_calls": executed,
        })

    @classmethod
    def reset(cls, session_id: str) -> Dict[str, Any]:
        expired = ConversationStore().expire(session_id)
        return success_response({"session_id": session_id, "expired": expired})
