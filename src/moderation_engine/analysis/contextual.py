"""Qualitative contextual assessment from a generative model, with retry and degradation."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_incrementing,
)

from moderation_engine.analysis.prompt_templates import (
    ANALYSIS_UNAVAILABLE,
    CONTEXTUAL_ANALYSIS_PROMPT,
    CONTEXTUAL_ANALYSIS_SYSTEM,
    NO_MEANINGFUL_RESPONSE,
    NOT_CONFIGURED,
)
from moderation_engine.exceptions import ConfigurationError
from moderation_engine.observability.logger import get_logger
from moderation_engine.protocols.llm import LLMProvider

logger = get_logger("contextual")


class ContextualAnalyzer:
    """Ask the LLM for a narrative assessment of harmful content.

    Each attempt is bounded by ``timeout_seconds``. Failed attempts are retried
    with a linear backoff of ``backoff_seconds * attempt_number``. Once every
    attempt has failed the analyzer returns a fixed "unavailable" message rather
    than raising, so callers can always proceed to classification.
    """

    def __init__(
        self,
        llm: LLMProvider | None,
        max_attempts: int = 3,
        backoff_seconds: float = 1.0,
        timeout_seconds: float = 30.0,
        temperature: float = 0.2,
        max_tokens: int = 1024,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        if max_attempts < 1:
            raise ConfigurationError(f"contextual max_attempts must be at least 1, got {max_attempts}")
        self._llm = llm
        self._max_attempts = max_attempts
        self._backoff = backoff_seconds
        self._timeout = timeout_seconds
        self._temperature = temperature
        self._max_tokens = max_tokens
        self._sleep = sleep

    @property
    def configured(self) -> bool:
        return self._llm is not None

    async def analyze(self, text: str) -> str:
        if self._llm is None:
            logger.info("contextual_not_configured")
            return NOT_CONFIGURED

        prompt = CONTEXTUAL_ANALYSIS_PROMPT.format(text=text)

        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(self._max_attempts),
                wait=wait_incrementing(start=self._backoff, increment=self._backoff),
                retry=retry_if_exception_type(Exception),
                before_sleep=self._log_retry,
                sleep=self._sleep,
                reraise=True,
            ):
                with attempt:
                    answer = await asyncio.wait_for(
                        self._llm.generate(
                            prompt,
                            system=CONTEXTUAL_ANALYSIS_SYSTEM,
                            temperature=self._temperature,
                            max_tokens=self._max_tokens,
                        ),
                        timeout=self._timeout,
                    )
        except Exception as e:
            logger.warning(
                "contextual_unavailable",
                attempts=self._max_attempts,
                error=str(e) or type(e).__name__,
            )
            return ANALYSIS_UNAVAILABLE

        if not answer or not answer.strip():
            logger.info("contextual_empty_response")
            return NO_MEANINGFUL_RESPONSE

        logger.info("contextual_analyzed", chars=len(answer))
        return answer.strip()

    @staticmethod
    def _log_retry(retry_state: RetryCallState) -> None:
        error = retry_state.outcome.exception() if retry_state.outcome else None
        logger.warning(
            "contextual_retry",
            attempt=retry_state.attempt_number,
            wait_seconds=retry_state.next_action.sleep if retry_state.next_action else None,
            error=(str(error) or type(error).__name__) if error else None,
        )
