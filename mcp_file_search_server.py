#!/usr/bin/env python3
"""
File Search MCP Server
Exposes a single search_in_file tool over stdio: scan a text file for a literal
keyword and return the matching lines with their line numbers.
"""

import asyncio
import json
import logging
import sys
from typing import Any, Dict, List, Optional

import mcp.server.stdio
import mcp.types as types
from mcp.server import NotificationOptions, Server
from mcp.server.models import InitializationOptions
from pydantic import ValidationError

from file_search import (
    ErrorKind,
    FileSearchExecutor,
    SearchFailure,
    SearchOutcome,
    SearchRequest,
)
from file_search_config import ServerConfig, configure_logging

logger = logging.getLogger(__name__)

TOOL_NAME = "search_in_file"
TOOL_DESCRIPTION = "Search for a specified keyword within a file and return matching lines with line numbers"

SEARCH_IN_FILE_TOOL = types.Tool(
    name=TOOL_NAME,
    description=TOOL_DESCRIPTION,
    inputSchema={
        "type": "object",
        "properties": {
            "filePath": {"type": "string", "description": "The path to the file to search in"},
            "keyword": {"type": "string", "description": "The keyword to search for"},
        },
        "required": ["filePath", "keyword"],
    },
    outputSchema={
        "type": "object",
        "properties": {
            "matches": {
                "type": "array",
                "items": {
                    "type": "object",
                    "properties": {
                        "line": {"type": "number", "description": "Line number where the match was found"},
                        "content": {"type": "string", "description": "Content of the line containing the match"},
                    },
                    "required": ["line", "content"],
                },
            },
            "totalMatches": {"type": "number", "description": "Total number of matches found"},
        },
        "required": ["matches", "totalMatches"],
    },
)


def format_validation_error(error: ValidationError) -> str:
    problems = []
    for detail in error.errors():
        location = ".".join(str(part) for part in detail["loc"]) or "arguments"
        problems.append(f"{location}: {detail['msg']}")
    return "; ".join(problems)


def to_call_tool_result(outcome: SearchOutcome) -> types.CallToolResult:
    """Wrap an executor outcome in the MCP tool response envelope."""
    if isinstance(outcome, SearchFailure):
        return types.CallToolResult(
            content=[types.TextContent(type="text", text=outcome.describe())],
            isError=True,
        )

    payload = outcome.to_payload()
    return types.CallToolResult(
        content=[types.TextContent(type="text", text=json.dumps(payload, ensure_ascii=False))],
        structuredContent=payload,
        isError=False,
    )


class FileSearchServer:
    """MCP server advertising and dispatching the search_in_file tool."""

    def __init__(self, config: Optional[ServerConfig] = None, executor: Optional[FileSearchExecutor] = None):
        self.config = config or ServerConfig()
        self.executor = executor or FileSearchExecutor(
            max_file_bytes=self.config.max_file_bytes,
            read_timeout=self.config.read_timeout,
        )
        self.server = Server(self.config.server_name, version=self.config.server_version)
        self._setup_handlers()

    def _setup_handlers(self):
        """Register the MCP list/call handlers."""

        @self.server.list_tools()
        async def handle_list_tools() -> List[types.Tool]:
            return self.list_operations()

        # arguments are validated by SearchRequest so failures carry our error kinds
        @self.server.call_tool(validate_input=False)
        async def handle_call_tool(name: str, arguments: Dict[str, Any]) -> types.CallToolResult:
            return await self.invoke(name, arguments)

    def list_operations(self) -> List[types.Tool]:
        return [SEARCH_IN_FILE_TOOL]

    async def invoke(self, name: str, arguments: Optional[Dict[str, Any]]) -> types.CallToolResult:
        """Validate arguments, run the search and wrap the outcome."""
        if name != TOOL_NAME:
            logger.warning("Rejected call to unknown tool %s", name)
            return to_call_tool_result(
                SearchFailure(kind=ErrorKind.INVALID_ARGUMENT, message=f"Unknown tool: {name}")
            )

        try:
            request = SearchRequest.model_validate(arguments)
        except ValidationError as e:
            logger.warning("Invalid arguments for %s: %s", name, e)
            return to_call_tool_result(
                SearchFailure(
                    kind=ErrorKind.INVALID_ARGUMENT,
                    message=f"Invalid arguments for {name}: {format_validation_error(e)}",
                )
            )

        outcome = await self.executor.search(request.file_path, request.keyword)
        return to_call_tool_result(outcome)

    def initialization_options(self) -> InitializationOptions:
        return InitializationOptions(
            server_name=self.config.server_name,
            server_version=self.config.server_version,
            capabilities=self.server.get_capabilities(
                notification_options=NotificationOptions(),
                experimental_capabilities={},
            ),
        )

    async def run(self):
        """Serve over stdio until the client disconnects."""
        async with mcp.server.stdio.stdio_server() as (read_stream, write_stream):
            logger.info("MCP Server is running...")
            try:
                await self.server.run(read_stream, write_stream, self.initialization_options())
            finally:
                logger.info("MCP Server shutting down")


async def main(config: Optional[ServerConfig] = None):
    """Main entry point for the MCP server."""
    server = FileSearchServer(config)
    await server.run()


def run():
    try:
        config = ServerConfig()
        configure_logging(config.log_level)
        asyncio.run(main(config))
    except KeyboardInterrupt:
        pass
    except Exception:
        logger.exception("Fatal error running MCP server")
        sys.exit(1)


if __name__ == "__main__":
    run()
