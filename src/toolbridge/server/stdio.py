"""
MCP Stdio Server 實作。
以換行分隔的 JSON-RPC 2.0 訊息透過標準輸入/輸出通訊，供 Claude Desktop 等客戶端使用。
"""
from __future__ import annotations

import asyncio
import json
import sys
from typing import Any, Dict, Optional, Set, TextIO

from toolbridge.protocol.dispatcher import McpDispatcher
from toolbridge.protocol.jsonrpc import ErrorCode, JsonRpcError, build_error
from toolbridge.runtime.context import ServerContext
from toolbridge.utils.logger import logger


class StdioServer:
    """透過標準輸入輸出的 MCP 伺服器，每一行各自處理、可同時進行。"""

    def __init__(
        self,
        context: ServerContext,
        *,
        stdin: Optional[TextIO] = None,
        stdout: Optional[TextIO] = None,
    ) -> None:
        self.dispatcher = McpDispatcher(context)
        self._stdin = stdin or sys.stdin
        self._stdout = stdout or sys.stdout
        self._pending: Set[asyncio.Task[None]] = set()

    def _send_message(self, message: Dict[str, Any]) -> None:
        """將字典轉為 JSON 字串後寫入 stdout。"""

        self._stdout.write(json.dumps(message, ensure_ascii=False) + "\n")
        self._stdout.flush()

    async def _handle_line(self, line: str) -> None:
        try:
            response = await self.dispatcher.handle_raw(line, transport="stdio")
        except Exception:
            logger.exception("處理 stdio 訊息時發生未預期錯誤")
            response = build_error(None, JsonRpcError(ErrorCode.INTERNAL_ERROR, "Internal error"))
        if response is not None:
            self._send_message(response)

    async def serve(self) -> None:
        """讀取 stdin 直到 EOF，等待所有進行中的請求完成後結束。"""

        logger.info("MCP stdio server 啟動")
        while True:
            line = await asyncio.to_thread(self._stdin.readline)
            if not line:
                break
            if not line.strip():
                continue
            task = asyncio.create_task(self._handle_line(line))
            self._pending.add(task)
            task.add_done_callback(self._pending.discard)

        if self._pending:
            await asyncio.gather(*self._pending)
        logger.info("MCP stdio server 結束（stdin 已關閉）")

    def run(self) -> None:
        asyncio.run(self.serve())


def run_stdio_server(context: ServerContext) -> None:
    """建立並啟動 MCP Stdio 伺服器主迴圈。"""

    StdioServer(context).run()
