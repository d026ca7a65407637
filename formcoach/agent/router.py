from __future__ import annotations
import logging
from typing import Dict, List, Any
from langchain_core.messages import HumanMessage, SystemMessage
from formcoach.agent.llm import get_llm
from formcoach.agent.tools import TOOLS

logger = logging.getLogger(__name__)

SYSTEM = (
    "You are a workout assistant that ONLY controls exercise tracking. "
    "Use tools ONLY when the user clearly asks to choose an exercise or to start/end/reset/check a workout. "
    "Supported exercises: bicep curl, squats, push-ups, lunges, overhead press, lateral raises, "
    "pull-ups, glute bridges, crunches, plank. "
    "If the user says anything unrelated (e.g., 'record my run', 'open music'), "
    "DO NOT call tools and respond concisely that it's not a workout command."
)

FEWSHOTS = [
    ("let's do squats", "select_exercise"),
    ("go", "start_workout"),
    ("I'm done", "end_workout"),
    ("start over", "reset_workout"),
    ("how many have I done?", "workout_status"),
    ("record my run", "noop"),
]

_TOOL_MAP: Dict[str, Any] = {t.name: t for t in TOOLS}

def _blank_result(user_text: str) -> dict:
    return {
        "transcript": user_text,
        "action": "noop",
        "args": {},
        "tool_output": "",
        "llm_text": "",
        "steps": [],
    }

def _messages(user_text: str) -> list:
    messages = [SystemMessage(content=SYSTEM)]
    for u, label in FEWSHOTS:
        messages.append(HumanMessage(content=u))
        if label == "noop":
            messages.append(SystemMessage(content="Not a workout command. Do not call tools."))
        else:
            messages.append(SystemMessage(content=f"Call tool: {label}"))
    messages.append(HumanMessage(content=user_text))
    return messages

def route_and_execute(user_text: str) -> dict:
    """Let the chat model pick at most one tool for ``user_text`` and run it.

    Returns a dict with the chosen action, its args and output, and a list of
    human-readable steps. Model or tool failures leave the action as "noop".
    """
    steps: List[str] = []
    result = _blank_result(user_text)
    steps.append(f"router: received command → {user_text!r}")

    try:
        llm = get_llm().bind_tools(TOOLS)
        res = llm.invoke(_messages(user_text))
    except Exception as e:
        logger.warning("router: LLM unavailable: %r", e)
        steps.append(f"router: LLM error → {e!r}")
        result["llm_text"] = "LLM unavailable (check OPENAI_API_KEY)."
        result["steps"] = steps
        return result

    result["llm_text"] = (getattr(res, "content", "") or "").strip()
    tcalls = getattr(res, "tool_calls", None) or []

    if not tcalls:
        steps.append("router: no tool selected (noop)")
        result["steps"] = steps
        return result

    # Execute first tool call
    tc = tcalls[0]
    name = tc.get("name")
    args = tc.get("args") or {}
    steps.append(f"router: selected tool → {name} with args {args}")
    tool = _TOOL_MAP.get(name)
    if tool is None:
        steps.append(f"router: unknown tool {name} (noop)")
        result["steps"] = steps
        return result
    try:
        out = tool.invoke(args)
    except Exception as e:
        logger.exception("tool %s failed", name)
        steps.append(f"tool: ERROR during execution → {e!r}")
        result["steps"] = steps
        return result
    result["action"] = name
    result["args"] = args
    result["tool_output"] = out
    steps.append(f"tool: executed {name} → {out}")
    result["steps"] = steps
    return result
