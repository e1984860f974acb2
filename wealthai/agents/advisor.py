"""
AI Wealth Advisor Agent

Wraps a single Gemini call. The user's profile and the last few chat turns
are rendered into one prompt; the first candidate's text is the reply.

BOUNDARIES:
- CAN: Answer finance questions with the user's own numbers
- CANNOT: Read or write the profile store
- NEVER retries: one attempt per message, any failure surfaces as
  AssistantUnavailableError and the chat page shows an apology turn
"""

from collections.abc import Sequence
from typing import Any, Optional

import google.generativeai as genai
import structlog

from wealthai.config import GeminiSettings, get_settings
from wealthai.metrics.calculator import format_number, format_percent, metrics_for
from wealthai.models.chat import ChatTurn
from wealthai.models.profile import UserProfile


logger = structlog.get_logger(__name__)


class AssistantError(Exception):
    """Base exception for assistant calls."""
    pass


class AssistantNotConfiguredError(AssistantError):
    """No Gemini API key; the call was not attempted."""
    pass


class AssistantUnavailableError(AssistantError):
    """The Gemini call failed or returned an unusable response."""
    pass


ADVISOR_PERSONA = (
    "You are a professional and empathetic wealth management advisor "
    "specializing in personal finance for Indian users. Your goal is to "
    "provide practical, actionable financial advice."
)

ADVISOR_GUIDELINES = """Guidelines:
1. Always reference their actual financial numbers when giving advice
2. Be encouraging and positive while being realistic
3. Provide specific, actionable steps they can take
4. Consider their goals when making recommendations
5. Use Indian financial context (INR, Indian investment options, tax laws)
6. Keep responses concise but comprehensive (200-300 words ideal)
7. Use emojis sparingly for friendliness

Now respond to their question with personalized advice based on their profile."""


def build_system_context(profile: UserProfile) -> str:
    """Render the advisor persona and the user's financial profile."""
    metrics = metrics_for(profile)
    short_term, long_term = profile.goals_text

    return f"""{ADVISOR_PERSONA}

User's Financial Profile:
- Name: {profile.name}
- Monthly Income: ₹{format_number(profile.income)}
- Monthly Expenses: ₹{format_number(profile.expenses)}
- Monthly EMI/Loans: ₹{format_number(profile.emi)}
- Monthly Savings: ₹{format_number(metrics.savings)} ({format_percent(metrics.savings_rate)}% savings rate)
- Short-term Goals (1-3 years): {short_term}
- Long-term Goals (5+ years): {long_term}

{ADVISOR_GUIDELINES}"""


def build_prompt(
    message: str,
    profile: UserProfile,
    history: Sequence[ChatTurn],
    history_window: int = 5,
) -> str:
    """
    Build the single text input sent to Gemini.

    Layout: system context, the last `history_window` turns as
    "User:"/"Assistant:" lines, then the new message and an open
    "Assistant:" line for the model to complete.
    """
    parts = [build_system_context(profile), ""]

    recent = list(history)[-history_window:] if history_window > 0 else []
    for turn in recent:
        parts.append(f"{turn.label}: {turn.text}\n")

    parts.append(f"User: {message}\n")
    parts.append("Assistant:")
    return "\n".join(parts)


def extract_reply_text(response: Any) -> str:
    """
    Pull candidates[0].content.parts[0].text out of a Gemini response.

    Raises AssistantUnavailableError if any level is missing or the text is
    empty.
    """
    try:
        text = response.candidates[0].content.parts[0].text
    except (AttributeError, IndexError, KeyError, TypeError) as e:
        raise AssistantUnavailableError("Invalid response format from Gemini API") from e

    if not isinstance(text, str) or not text.strip():
        raise AssistantUnavailableError("Invalid response format from Gemini API")
    return text


class AdvisorAgent:
    """
    AI agent behind the chat page.

    RESPONSIBILITIES:
    - Build a profile-aware prompt for each question
    - Make exactly one Gemini call per question
    - Return the reply text or raise a typed error
    """

    def __init__(
        self,
        settings: Optional[GeminiSettings] = None,
        model: Optional[Any] = None,
    ):
        """
        Args:
            settings: Gemini settings; loaded from the environment if None
            model: Anything with an async generate_content_async(prompt).
                   Built from settings when None and an API key is present.
        """
        self._settings = settings or get_settings().gemini
        self._model = model
        if self._model is None and self._settings.is_configured:
            self._configure_genai()

    def _configure_genai(self):
        """Configure Google Generative AI."""
        genai.configure(api_key=self._settings.api_key)
        self._model = genai.GenerativeModel(
            model_name=self._settings.model_name,
            generation_config=self.generation_config,
        )

    @property
    def generation_config(self) -> dict:
        return {
            "temperature": self._settings.temperature,
            "top_k": self._settings.top_k,
            "top_p": self._settings.top_p,
            "max_output_tokens": self._settings.max_output_tokens,
        }

    @property
    def is_configured(self) -> bool:
        return self._model is not None

    async def ask(
        self,
        message: str,
        profile: UserProfile,
        history: Sequence[ChatTurn] = (),
    ) -> str:
        """
        Answer one question.

        Raises:
            AssistantNotConfiguredError: No API key; nothing was sent
            AssistantUnavailableError: The call failed or the response was unusable
        """
        if not self.is_configured:
            raise AssistantNotConfiguredError(
                "Gemini API key is not configured. Please add GEMINI_API_KEY to your .env file."
            )

        prompt = build_prompt(
            message,
            profile,
            history,
            history_window=self._settings.history_window,
        )

        try:
            response = await self._model.generate_content_async(prompt)
        except Exception as e:
            logger.error("gemini_request_failed", error=str(e))
            raise AssistantUnavailableError(f"Gemini request failed: {e}") from e

        return extract_reply_text(response)
