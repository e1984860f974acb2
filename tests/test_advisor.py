"""Tests for the Gemini advisor agent. The model is always a fake."""

import asyncio
import pytest
from types import SimpleNamespace

from wealthai.agents import (
    AdvisorAgent,
    AssistantNotConfiguredError,
    AssistantUnavailableError,
    build_prompt,
    build_system_context,
    extract_reply_text,
)
from wealthai.config import GeminiSettings
from wealthai.models.chat import ChatRole, ChatTurn
from wealthai.models.profile import UserProfile

from conftest import FakeGeminiModel, gemini_response, profile_document


@pytest.fixture
def profile():
    return UserProfile.from_document(profile_document())


def turns(count):
    return [
        ChatTurn(role=ChatRole.USER if i % 2 else ChatRole.ASSISTANT, text=f"turn {i}")
        for i in range(count)
    ]


class TestPromptBuilding:
    """Tests for the pure prompt functions."""

    def test_system_context_includes_numbers_and_goals(self, profile):
        context = build_system_context(profile)
        assert "- Name: Asha" in context
        assert "- Monthly Income: ₹50,000" in context
        assert "- Monthly Savings: ₹10,000 (20.0% savings rate)" in context
        assert "Short-term Goals (1-3 years): Emergency fund" in context

    def test_blank_goals_are_not_specified(self):
        profile = UserProfile.from_document(profile_document(shortTermGoals="", longTermGoals=""))
        context = build_system_context(profile)
        assert "Short-term Goals (1-3 years): Not specified" in context
        assert "Long-term Goals (5+ years): Not specified" in context

    def test_zero_income_savings_rate(self):
        profile = UserProfile.from_document(profile_document(income="0", expenses="0", emi="0"))
        assert "(N/A% savings rate)" in build_system_context(profile)

    def test_only_last_five_turns_are_included(self, profile):
        prompt = build_prompt("What now?", profile, turns(7))
        assert "turn 0" not in prompt
        assert "turn 1" not in prompt
        for i in range(2, 7):
            assert f"turn {i}" in prompt

    def test_prompt_ends_with_message_and_open_turn(self, profile):
        prompt = build_prompt("How do I budget?", profile, [])
        assert prompt.endswith("User: How do I budget?\n\nAssistant:")

    def test_history_uses_role_labels(self, profile):
        history = [
            ChatTurn(role=ChatRole.ASSISTANT, text="Hi Asha"),
            ChatTurn(role=ChatRole.USER, text="Hello"),
        ]
        prompt = build_prompt("Next", profile, history)
        assert "Assistant: Hi Asha" in prompt
        assert "User: Hello" in prompt


class TestExtractReply:
    """Tests for response parsing."""

    def test_first_candidate_text(self):
        assert extract_reply_text(gemini_response("Invest in index funds")) == "Invest in index funds"

    @pytest.mark.parametrize("response", [
        SimpleNamespace(candidates=[]),
        SimpleNamespace(candidates=[SimpleNamespace(content=SimpleNamespace(parts=[]))]),
        SimpleNamespace(),
        gemini_response(""),
        None,
    ])
    def test_unusable_responses(self, response):
        with pytest.raises(AssistantUnavailableError):
            extract_reply_text(response)


class TestAdvisorAgent:
    """Tests for the agent's single call."""

    def test_ask_returns_reply(self, assistant, fake_model, profile):
        reply = asyncio.run(assistant.ask("How can I save?", profile))
        assert reply == "Save 20% of your income."
        assert len(fake_model.prompts) == 1
        assert "User: How can I save?" in fake_model.prompts[0]

    def test_not_configured_makes_no_call(self, profile):
        agent = AdvisorAgent(settings=GeminiSettings(api_key=None))
        assert not agent.is_configured
        with pytest.raises(AssistantNotConfiguredError, match="GEMINI_API_KEY"):
            asyncio.run(agent.ask("Hi", profile))

    def test_placeholder_key_is_not_configured(self):
        assert not GeminiSettings(api_key="undefined").is_configured
        assert not GeminiSettings(api_key="").is_configured
        assert GeminiSettings(api_key="abc").is_configured

    def test_transport_failure_is_unavailable(self, gemini_settings, profile):
        model = FakeGeminiModel(error=RuntimeError("503 Service Unavailable"))
        agent = AdvisorAgent(settings=gemini_settings, model=model)
        with pytest.raises(AssistantUnavailableError):
            asyncio.run(agent.ask("Hi", profile))
        assert len(model.prompts) == 1

    def test_generation_config(self, assistant):
        assert assistant.generation_config == {
            "temperature": 0.7,
            "top_k": 40,
            "top_p": 0.95,
            "max_output_tokens": 1024,
        }


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
