from typing import Optional

from openai import AsyncOpenAI
from tenacity import (
    RetryError,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from preventa.config import get_settings
from preventa.core.exceptions import AIServiceError
from preventa.core.logging import get_logger
from preventa.schemas.health import HealthMetrics

logger = get_logger(__name__)

HEALTH_COACH_PROMPT = (
    "You are a supportive preventive-health coach. Given a user's metrics for "
    "today, write two or three short sentences of encouragement and one concrete "
    "suggestion. Do not diagnose conditions or recommend medication changes."
)


class AIService:
    """Text completions from the OpenAI chat API.

    Used only for optional narrative insights; the rule-based generator and the
    progress aggregator never depend on it.
    """

    def __init__(self, client: Optional[AsyncOpenAI] = None):
        settings = get_settings()
        self.api_key = settings.openai_api_key
        self.model = settings.openai_model
        self.client = client
        if self.client is None and self.api_key:
            self.client = AsyncOpenAI(api_key=self.api_key)

    @property
    def is_configured(self) -> bool:
        return self.client is not None

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=10),
        retry=retry_if_exception_type((Exception,)),
        before_sleep=lambda retry_state: logger.warning(
            "openai_retry",
            attempt=retry_state.attempt_number,
            wait=retry_state.next_action.sleep,
        ),
    )
    async def _complete(self, messages: list[dict[str, str]], max_tokens: int, temperature: float) -> str:
        response = await self.client.chat.completions.create(
            model=self.model,
            messages=messages,
            max_tokens=max_tokens,
            temperature=temperature,
        )
        return response.choices[0].message.content or ""

    async def generate_completion(
        self,
        system_prompt: str,
        user_prompt: str,
        context: Optional[str] = None,
        max_tokens: int = 350,
        temperature: float = 0.7,
    ) -> str:
        """Send a single-turn chat request and return the reply text.

        Raises:
            AIServiceError: If no API key is configured or every attempt fails.
        """
        if not self.is_configured:
            raise AIServiceError("OpenAI API key is not configured")

        messages = [{"role": "system", "content": system_prompt}]
        if context:
            messages.append({"role": "system", "content": f"Context:\n{context}"})
        messages.append({"role": "user", "content": user_prompt})

        try:
            return await self._complete(messages, max_tokens, temperature)
        except RetryError as e:
            cause = e.last_attempt.exception()
            logger.error("openai_completion_failed", model=self.model, error=str(cause))
            raise AIServiceError(f"Completion failed: {cause}")

    async def generate_health_insight(
        self, metrics: HealthMetrics, recent_trends: Optional[str] = None
    ) -> str:
        prompt = f"Today's metrics:\n{metrics.summary()}"
        if recent_trends:
            prompt += f"\n\nRecent trends:\n{recent_trends}"
        return await self.generate_completion(HEALTH_COACH_PROMPT, prompt)


# Singleton instance
_ai_service: Optional[AIService] = None


def get_ai_service() -> AIService:
    """Get or create the AI service singleton."""
    global _ai_service
    if _ai_service is None:
        _ai_service = AIService()
    return _ai_service
