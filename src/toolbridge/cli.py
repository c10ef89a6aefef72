"""toolbridge CLI 入口，提供 MCP server 與輔助指令。"""
from __future__ import annotations

import argparse
import json
from typing import Sequence

from toolbridge.utils.logger import logger


def _serve_module(
    module: str,
    attr: str | None,
    host: str,
    port: int,
    stdio: bool,
    legacy_method_calls: bool,
) -> None:
    from toolbridge.runtime import run

    run(
        module=module,
        attr=attr,
        host=host,
        port=port,
        stdio=stdio,
        legacy_method_calls=legacy_method_calls,
    )


def _list_tools(module: str, attr: str | None, indent: int | None) -> None:
    from toolbridge.runtime import load_context

    context = load_context(module, attr=attr)
    tools = context.registry.to_mcp_tools()
    logger.debug("列出 %d 個工具", len(tools))
    print(json.dumps({"tools": tools}, ensure_ascii=False, indent=indent))


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="toolbridge", description="toolbridge CLI")
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve_parser = subparsers.add_parser("serve", help="載入工具模組並啟動 MCP 伺服器")
    serve_parser.add_argument("module", help="工具模組（dotted 名稱或 .py 路徑，例如 myapp.controllers）")
    serve_parser.add_argument(
        "--attr",
        help="模組中的目標屬性（ServerContext / ToolRegistry / FastAPI app / Tool Definition Source）",
    )
    serve_parser.add_argument("--port", type=int, default=9090, help="監聽 port，預設 9090")
    serve_parser.add_argument("--host", default="0.0.0.0", help="監聽 host，預設 0.0.0.0")
    serve_parser.add_argument(
        "--stdio",
        action="store_true",
        help="改用 stdio 啟動（供 MCP Desktop 類型使用）",
    )
    serve_parser.add_argument(
        "--legacy-method-calls",
        action="store_true",
        help="允許以工具名稱直接作為 JSON-RPC method 呼叫",
    )
    serve_parser.set_defaults(
        func=lambda args: _serve_module(
            module=args.module,
            attr=args.attr,
            host=args.host,
            port=args.port,
            stdio=args.stdio,
            legacy_method_calls=args.legacy_method_calls,
        )
    )

    list_parser = subparsers.add_parser("list-tools", help="輸出 tools/list 的 JSON 內容")
    list_parser.add_argument("module", help="工具模組（dotted 名稱或 .py 路徑）")
    list_parser.add_argument("--attr", help="模組中的目標屬性")
    list_parser.add_argument("--indent", type=int, default=2, help="JSON 縮排，預設 2")
    list_parser.set_defaults(
        func=lambda args: _list_tools(module=args.module, attr=args.attr, indent=args.indent)
    )

    return parser


def main(argv: Sequence[str] | None = None) -> None:
    parser = _build_parser()
    args = parser.parse_args(argv)
    args.func(args)


if __name__ == "__main__":
    main()
