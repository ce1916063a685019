"""External Call Service: named client + retry policy + typed result for one external operation.

Invariants:
    - Never raises transport exceptions: every per-request outcome becomes an ExternalResult
    - Overall deadline = the named client's timeout, covering every attempt and retry wait;
      when it elapses the in-flight work is cancelled and the result is Failure(TIMEOUT)
    - 2xx payloads are deserialized into T; malformed payloads are terminal Failure(EXCEPTION)
    - Non-2xx (after the policy retried what it could) is Failure(NOT_SUCCESS_STATUS)
    - Failure messages are generic; details go to the log only

Design Decisions:
    - Configuration errors (unknown client name) and route-template errors are raised, not
      wrapped: they are programming/deployment faults, not outcomes of the external call
    - asyncio.wait_for for the deadline: cancelling the retry loop abandons the attempt
      immediately instead of waiting for a response that would be discarded
"""

import asyncio
import logging
from typing import TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from person_api.core.domain_types import FailureReason, OutcomeTag
from person_api.core.external_result import ExternalResult, Failure, Success
from person_api.core.route_templates import build_path
from person_api.infrastructure.client_pool import ClientPool
from person_api.infrastructure.retry_policy import (
    AttemptOutcome, RetryConfig, RetryPolicy, classify_outcome,
)

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

TIMEOUT_MESSAGE = "The external service did not respond in time."
EXCEPTION_MESSAGE = "An error occurred while communicating with the external service."
MALFORMED_MESSAGE = "The external service returned an unreadable response."


class ExternalCallService:
    """Performs named external operations and translates outcomes to ExternalResult."""

    def __init__(
        self,
        pool: ClientPool,
        client_name: str,
        retry_config: RetryConfig,
        retry_policy: RetryPolicy | None = None,
        templates: dict[str, str] | None = None,
    ):
        self._pool = pool
        self._client_name = client_name
        self._retry_config = retry_config
        self._retry_policy = retry_policy or RetryPolicy()
        self._templates = templates

    async def call(
        self,
        operation_name: str,
        params: dict[str, object],
        result_type: type[ModelT],
    ) -> ExternalResult[ModelT]:
        handle = self._pool.acquire(self._client_name)
        path = build_path(operation_name, params, self._templates)
        extra = {"client_name": handle.name, "operation": operation_name}

        async def attempt() -> AttemptOutcome:
            try:
                response = await handle.client.get(path)
            except httpx.HTTPError as exc:
                return AttemptOutcome(error=exc)
            return AttemptOutcome(response=response)

        try:
            outcome = await asyncio.wait_for(
                self._retry_policy.execute(attempt, self._retry_config),
                timeout=handle.config.timeout_seconds,
            )
        except asyncio.TimeoutError:
            logger.warning(
                f"External call exceeded {handle.config.timeout_seconds}s deadline",
                extra={**extra, "failure_reason": FailureReason.TIMEOUT.value},
            )
            return Failure(FailureReason.TIMEOUT, TIMEOUT_MESSAGE)
        except Exception as e:
            logger.error(
                f"Unexpected error during external call: {e}",
                extra={**extra, "failure_reason": FailureReason.EXCEPTION.value},
                exc_info=True,
            )
            return Failure(FailureReason.EXCEPTION, EXCEPTION_MESSAGE)

        return self._to_result(outcome, result_type, extra)

    def _to_result(
        self,
        outcome: AttemptOutcome,
        result_type: type[ModelT],
        extra: dict,
    ) -> ExternalResult[ModelT]:
        if outcome.error is not None:
            if classify_outcome(outcome) is OutcomeTag.TIMEOUT:
                logger.warning(
                    f"External call timed out at transport level: {outcome.error!r}",
                    extra={**extra, "failure_reason": FailureReason.TIMEOUT.value},
                )
                return Failure(FailureReason.TIMEOUT, TIMEOUT_MESSAGE)
            logger.error(
                f"External call failed: {outcome.error!r}",
                extra={**extra, "failure_reason": FailureReason.EXCEPTION.value},
                exc_info=outcome.error,
            )
            return Failure(FailureReason.EXCEPTION, EXCEPTION_MESSAGE)

        response = outcome.response
        if not response.is_success:
            logger.warning(
                "External service responded with error status",
                extra={
                    **extra,
                    "status_code": response.status_code,
                    "failure_reason": FailureReason.NOT_SUCCESS_STATUS.value,
                },
            )
            return Failure(
                FailureReason.NOT_SUCCESS_STATUS,
                f"External service responded with status {response.status_code}.",
            )

        try:
            data = result_type.model_validate_json(response.content)
        except ValidationError as e:
            logger.error(
                f"External service returned a malformed payload: {e}",
                extra={**extra, "failure_reason": FailureReason.EXCEPTION.value},
            )
            return Failure(FailureReason.EXCEPTION, MALFORMED_MESSAGE)
        return Success(data)
