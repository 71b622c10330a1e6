"""Run blocking SDK calls off the event loop under a deadline."""

import asyncio
from typing import Any, Callable, Type


async def call_blocking(
    func: Callable[..., Any],
    *args: Any,
    timeout: float,
    timeout_error: Type[Exception],
    call_name: str,
    **kwargs: Any,
) -> Any:
    """
    Run a blocking call in a worker thread, bounded by a timeout.

    Args:
        func: Blocking callable (SDK method)
        timeout: Seconds to wait before giving up
        timeout_error: Exception class raised when the deadline passes
        call_name: Human-readable name of the call for the error message

    Raises:
        timeout_error: If the call does not finish in time
    """
    try:
        return await asyncio.wait_for(
            asyncio.to_thread(func, *args, **kwargs), timeout=timeout
        )
    except asyncio.TimeoutError as e:
        raise timeout_error(f"{call_name} timed out after {timeout:g}s") from e
