"""
Prompts module - LLM prompt templates.

Prompts are stored as separate Python files so that persona changes are
reviewed like code.
"""
from campus_relay.llm.prompts.campus_prompts import (
    CAMPUS_SYSTEM_PROMPT,
    get_campus_system_prompt,
)

__all__ = [
    "CAMPUS_SYSTEM_PROMPT",
    "get_campus_system_prompt",
]
