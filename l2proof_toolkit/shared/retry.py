"""
Retry utilities for handling transient failures.

This module provides a helper for retrying async operations with
configurable backoff. Proof construction itself never retries; the helper
is applied by callers around a whole assembly (see proofs.manager).

Exception Handling:
- By default, retries on RetryableException and transport errors
- NonRetryableException is never retried (propagates immediately)
- Can customize retryable_exceptions per operation
"""

import asyncio
import logging
from typing import Any, Callable, Optional, Tuple, Type, TypeVar

from web3.exceptions import BlockNotFound, Web3Exception

from l2proof_toolkit.shared.exceptions import (
    NonRetryableException,
    RetryableException,
)

T = TypeVar("T")

logger = logging.getLogger(__name__)

# Network/RPC related errors + the RetryableException hierarchy
DEFAULT_RETRYABLE_EXCEPTIONS: Tuple[Type[Exception], ...] = (
    RetryableException,  # TrieProofQueryFailed, CommitmentQueryFailed, ...
    ConnectionError,
    TimeoutError,
    asyncio.TimeoutError,
    Web3Exception,
    BlockNotFound,
)


def _compute_delay(
    attempt: int, base_delay: float, max_delay: float, exponential: bool
) -> float:
    if exponential:
        return min(base_delay * (2**attempt), max_delay)
    return base_delay


async def retry_async_operation(
    operation: Callable[..., T],
    *args: Any,
    max_attempts: int = 3,
    base_delay: float = 1.0,
    max_delay: float = 30.0,
    exponential: bool = True,
    retryable_exceptions: Optional[Tuple[Type[Exception], ...]] = None,
    operation_name: Optional[str] = None,
    on_retry: Optional[Callable[[Exception, int], None]] = None,
    **kwargs: Any,
) -> T:
    """
    Retry an async operation with configurable backoff.

    Args:
        operation: Async function to call
        *args: Positional arguments for the operation
        max_attempts: Maximum attempts
        base_delay: Initial delay between retries
        max_delay: Maximum delay between retries
        exponential: Use exponential backoff
        retryable_exceptions: Exception types to retry on
        operation_name: Optional name for logging
        on_retry: Optional callback called on each retry with (exception, attempt)
        **kwargs: Keyword arguments for the operation

    Returns:
        Result of the operation

    Example:
        bundle = await retry_async_operation(
            assembler.assemble_proof,
            resolver, node, "network.profile",
            max_attempts=5,
            operation_name="text_proof",
        )
    """
    if retryable_exceptions is None:
        retryable_exceptions = DEFAULT_RETRYABLE_EXCEPTIONS

    name = operation_name or getattr(operation, "__name__", "operation")
    last_exception: Optional[Exception] = None

    for attempt in range(max_attempts):
        try:
            return await operation(*args, **kwargs)
        except NonRetryableException:
            raise
        except retryable_exceptions as e:
            last_exception = e

            if attempt < max_attempts - 1:
                delay = _compute_delay(
                    attempt, base_delay, max_delay, exponential
                )
                logger.warning(
                    f"Attempt {attempt + 1}/{max_attempts} failed for "
                    f"{name}: {e}. Retrying in {delay:.1f}s..."
                )

                if on_retry:
                    on_retry(e, attempt + 1)

                await asyncio.sleep(delay)

    if last_exception:
        raise last_exception
    raise RuntimeError(
        "Unexpected state: no exception but all attempts exhausted"
    )
