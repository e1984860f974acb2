"""AI Agents package."""

from wealthai.agents.advisor import (
    AdvisorAgent,
    AssistantError,
    AssistantNotConfiguredError,
    AssistantUnavailableError,
    build_prompt,
    build_system_context,
    extract_reply_text,
)

__all__ = [
    "AdvisorAgent",
    "AssistantError",
    "AssistantNotConfiguredError",
    "AssistantUnavailableError",
    "build_prompt",
    "build_system_context",
    "extract_reply_text",
]
