"""
Retry Handler Module

Implements the bounded retry policy for upstream rate limiting.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, TypeVar, Union

from ollama_relay.common.errors import UpstreamError, UpstreamRateLimitedError
from ollama_relay.config import RelayConfig
from ollama_relay.providers.base import ProviderResponse, UpstreamStream

logger = logging.getLogger(__name__)

UpstreamResult = Union[ProviderResponse, UpstreamStream]
ResultT = TypeVar("ResultT", ProviderResponse, UpstreamStream)


@dataclass
class RetryResult:
    """
    Retry Result Data Class

    Encapsulates the successful upstream result and how many retries it took.
    """

    # Successful response or opened stream
    result: UpstreamResult
    # Number of retries before success (0 = first attempt)
    retry_count: int


class RetryHandler:
    """
    Rate Limit Retry Handler

    Implements the following retry logic:
    - Status code 429: sleep retry_delay_ms and try again, max_attempts in total
    - Any other non-2xx status: fail immediately, no delay
    - 429 on every attempt: raise UpstreamRateLimitedError

    Only the opening of a call is retried. Once a stream has been handed back
    to the caller, its body is never retried.
    """

    def __init__(self, max_attempts: int = 3, retry_delay_ms: int = 5000):
        """
        Initialize Handler

        Args:
            max_attempts: Total attempts (first call included)
            retry_delay_ms: Delay between attempts (ms)
        """
        self.max_attempts = max(1, max_attempts)
        self.retry_delay_ms = retry_delay_ms

    @classmethod
    def from_config(cls, config: RelayConfig) -> "RetryHandler":
        return cls(max_attempts=config.retry_max_attempts, retry_delay_ms=config.retry_delay_ms)

    async def execute(self, attempt: Callable[[], Awaitable[ResultT]]) -> ResultT:
        """
        Execute an upstream call with retry

        Args:
            attempt: Async callable performing one upstream call

        Returns:
            The first successful ProviderResponse / UpstreamStream

        Raises:
            UpstreamRateLimitedError: 429 on every attempt
            UpstreamError: any other non-2xx answer
        """
        result = await self.execute_with_result(attempt)
        return result.result  # type: ignore[return-value]

    async def execute_with_result(self, attempt: Callable[[], Awaitable[ResultT]]) -> RetryResult:
        for attempt_number in range(1, self.max_attempts + 1):
            outcome = await attempt()

            if outcome.is_success:
                return RetryResult(result=outcome, retry_count=attempt_number - 1)

            if not outcome.is_rate_limited:
                raise await self._to_error(outcome)

            if isinstance(outcome, UpstreamStream):
                await outcome.aclose()

            if attempt_number < self.max_attempts:
                logger.warning(
                    "Rate limit hit (429), retrying in %sms (Attempt %s/%s)",
                    self.retry_delay_ms,
                    attempt_number,
                    self.max_attempts,
                )
                await asyncio.sleep(self.retry_delay_ms / 1000)

        logger.error("Upstream still rate limited after %s attempts", self.max_attempts)
        raise UpstreamRateLimitedError(
            details={"attempts": self.max_attempts},
        )

    @staticmethod
    async def _to_error(outcome: UpstreamResult) -> UpstreamError:
        if isinstance(outcome, UpstreamStream):
            try:
                message = await outcome.read_error()
            finally:
                await outcome.aclose()
        else:
            message = outcome.describe_error()

        logger.error(
            "Upstream request failed: status_code=%s, error=%s",
            outcome.status_code,
            message,
        )
        return UpstreamError(
            details={"upstream_status": outcome.status_code, "upstream_error": message},
            upstream_status=outcome.status_code,
        )
