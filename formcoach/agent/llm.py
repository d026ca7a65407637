from __future__ import annotations
from langchain_openai import ChatOpenAI

from formcoach.config import ASSISTANT_MODEL


def get_llm() -> ChatOpenAI:
    # temperature low for tool-calling determinism
    return ChatOpenAI(model=ASSISTANT_MODEL, temperature=0)
