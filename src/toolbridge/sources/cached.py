"""只掃描一次的 Tool Definition Source 包裝。"""
from __future__ import annotations

from threading import Lock
from typing import Optional, Sequence, Tuple

from tenacity import Retrying, retry_if_exception_type, stop_after_attempt, wait_exponential
from tenacity.wait import wait_base

from toolbridge.core.metadata import RawOperation, ToolDefinitionSource
from toolbridge.exceptions import DiscoveryError
from toolbridge.utils.logger import logger


class CachedToolSource:
    """第一次 ``discover()`` 時掃描底層 source 並快取結果。

    掃描拋出 :class:`DiscoveryError`（例如模組暫時無法載入）時會以指數退避重試。
    """

    def __init__(
        self,
        source: ToolDefinitionSource,
        *,
        attempts: int = 3,
        wait: Optional[wait_base] = None,
    ) -> None:
        self.source = source
        self._attempts = attempts
        self._wait = wait or wait_exponential(multiplier=1, min=4, max=10)
        self._operations: Optional[Tuple[RawOperation, ...]] = None
        self._lock = Lock()

    def discover(self) -> Sequence[RawOperation]:
        if self._operations is None:
            with self._lock:
                if self._operations is None:
                    self._operations = self._discover_with_retry()
        return self._operations

    def invalidate(self) -> None:
        with self._lock:
            self._operations = None

    def _discover_with_retry(self) -> Tuple[RawOperation, ...]:
        retrying = Retrying(
            stop=stop_after_attempt(self._attempts),
            wait=self._wait,
            retry=retry_if_exception_type(DiscoveryError),
            before_sleep=lambda state: logger.warning(
                "掃描工具失敗，第 %d 次重試：%s", state.attempt_number, state.outcome.exception()
            ),
            reraise=True,
        )
        operations = retrying(self.source.discover)
        logger.info("掃描到 %d 個工具操作", len(operations))
        return tuple(operations)
