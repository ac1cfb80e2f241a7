import logging
import sys
from typing import Any, Dict, Optional

from fastmcp import FastMCP
from fastmcp.exceptions import ToolError
from fastmcp.tools import Tool
from pydantic import ValidationError

from file_search import ErrorKind, FileSearchExecutor, SearchFailure, SearchRequest
from file_search_config import ServerConfig, configure_logging
from mcp_file_search_server import SEARCH_IN_FILE_TOOL, TOOL_DESCRIPTION, TOOL_NAME, format_validation_error

logger = logging.getLogger(__name__)


def create_app(config: Optional[ServerConfig] = None, executor: Optional[FileSearchExecutor] = None) -> FastMCP:
    config = config or ServerConfig()
    executor = executor or FileSearchExecutor(
        max_file_bytes=config.max_file_bytes,
        read_timeout=config.read_timeout,
    )
    app = FastMCP(config.server_name, version=config.server_version)

    async def search_in_file(filePath: Any = None, keyword: Any = None) -> Dict[str, Any]:
        arguments = {
            name: value
            for name, value in (("filePath", filePath), ("keyword", keyword))
            if value is not None
        }
        try:
            request = SearchRequest.model_validate(arguments)
        except ValidationError as e:
            failure = SearchFailure(
                kind=ErrorKind.INVALID_ARGUMENT,
                message=f"Invalid arguments for {TOOL_NAME}: {format_validation_error(e)}",
            )
            raise ToolError(failure.describe()) from e

        outcome = await executor.search(request.file_path, request.keyword)
        if isinstance(outcome, SearchFailure):
            raise ToolError(outcome.describe())
        return outcome.to_payload()

    tool = Tool.from_function(search_in_file, name=TOOL_NAME, description=TOOL_DESCRIPTION)
    # advertise the stdio schema; SearchRequest is the only argument validator
    app.add_tool(tool.model_copy(update={"parameters": SEARCH_IN_FILE_TOOL.inputSchema}))
    return app


def run():
    try:
        config = ServerConfig()
        configure_logging(config.log_level)
        app = create_app(config)
        logger.info("MCP Server is running on %s:%s", config.host, config.port)
        app.run(transport="http", host=config.host, port=config.port)
    except KeyboardInterrupt:
        pass
    except Exception:
        logger.exception("Fatal error running MCP HTTP server")
        sys.exit(1)


if __name__ == "__main__":
    run()
