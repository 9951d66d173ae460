"""Shared plumbing for the Supabase repositories."""

import asyncio
import logging
from time import perf_counter
from typing import Any, Callable

from core.exceptions import DomainServiceError

class SupabaseRepository:
    """
    Base class for repositories over supabase-py.

    supabase-py is blocking, so every query runs in the default executor
    under a per-call timeout. Failures of any kind surface as
    DomainServiceError; queries slower than ``slow_query_ms`` are logged
    with their label.
    """

    def __init__(
        self,
        supabase_client,
        timeout_seconds: float = 5.0,
        slow_query_ms: int = 2000,
    ):
        self.supabase = supabase_client
        self.timeout_seconds = timeout_seconds
        self.slow_query_ms = slow_query_ms
        self.logger = logging.getLogger(type(self).__module__)

    async def _run(self, operation: Callable[[], Any], label: str) -> Any:
        """
        Executes one query built by ``operation``.

        Raises:
            DomainServiceError: If Supabase is not configured, the call
                times out or the backend fails
        """
        if not self.supabase:
            raise DomainServiceError("Supabase is not configured")

        loop = asyncio.get_running_loop()
        start = perf_counter()
        try:
            return await asyncio.wait_for(
                loop.run_in_executor(None, operation), timeout=self.timeout_seconds
            )
        except asyncio.TimeoutError as exc:
            self.logger.error(f"⏱️ {label} timed out after {self.timeout_seconds}s")
            raise DomainServiceError(f"{label} timed out") from exc
        except Exception as exc:
            self.logger.error(f"❌ {label} failed: {exc}")
            raise DomainServiceError(f"{label} failed: {exc}") from exc
        finally:
            elapsed_ms = (perf_counter() - start) * 1000
            if elapsed_ms >= self.slow_query_ms:
                self.logger.warning(
                    f"🐢 Slow Supabase query: {label}",
                    extra={"elapsed_ms": round(elapsed_ms, 2), "threshold_ms": self.slow_query_ms},
                )
