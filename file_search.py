"""
File search core
Request/result models and the executor that scans a text file for a literal keyword.
"""

import asyncio
import errno
import logging
import stat
from enum import Enum
from typing import Any, Dict, List, Optional, Union

import aiofiles
import aiofiles.os
from pydantic import BaseModel, ConfigDict, Field, computed_field

logger = logging.getLogger(__name__)


class ErrorKind(str, Enum):
    INVALID_ARGUMENT = "InvalidArgument"
    FILE_ACCESS_ERROR = "FileAccessError"
    UNKNOWN_ERROR = "UnknownError"


class SearchRequest(BaseModel):
    model_config = ConfigDict(strict=True, frozen=True)

    file_path: str = Field(..., alias="filePath", min_length=1, description="The path to the file to search in")
    keyword: str = Field(..., description="The keyword to search for")


class LineMatch(BaseModel):
    line: int = Field(..., ge=1, description="Line number where the match was found")
    content: str = Field(..., description="Content of the line containing the match")


class SearchResult(BaseModel):
    matches: List[LineMatch] = Field(default_factory=list)

    @computed_field(alias="totalMatches")
    @property
    def total_matches(self) -> int:
        """Total number of matches found."""
        return len(self.matches)

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)


class SearchFailure(BaseModel):
    kind: ErrorKind
    message: str

    def describe(self) -> str:
        return f"{self.kind.value}: {self.message}"


SearchOutcome = Union[SearchResult, SearchFailure]

UNKNOWN_ERROR_MESSAGE = "An unknown error occurred while searching the file"


def find_matching_lines(content: str, keyword: str) -> List[LineMatch]:
    """Return every line of ``content`` containing ``keyword``, numbered from 1.

    Lines are split on ``\\n`` only, so a trailing ``\\r`` stays part of the
    line. An empty keyword matches every line.
    """
    return [
        LineMatch(line=line_number, content=line)
        for line_number, line in enumerate(content.split("\n"), 1)
        if keyword in line
    ]


class FileSearchExecutor:
    """Reads a file and filters its lines by literal substring."""

    def __init__(
        self,
        max_file_bytes: Optional[int] = None,
        read_timeout: Optional[float] = None,
        encoding: str = "utf-8",
    ):
        self.max_file_bytes = max_file_bytes
        self.read_timeout = read_timeout
        self.encoding = encoding

    async def search(self, file_path: str, keyword: str) -> SearchOutcome:
        """Search ``file_path`` for ``keyword``.

        Returns a SearchResult on success or a SearchFailure, never both.
        """
        try:
            if self.read_timeout is not None:
                content = await asyncio.wait_for(self._read_text(file_path), timeout=self.read_timeout)
            else:
                content = await self._read_text(file_path)
        except asyncio.TimeoutError:
            logger.warning("Timed out reading %s after %ss", file_path, self.read_timeout)
            return SearchFailure(
                kind=ErrorKind.FILE_ACCESS_ERROR,
                message=f"Error searching file: timed out after {self.read_timeout}s reading '{file_path}'",
            )
        except OSError as e:
            logger.warning("Cannot read %s: %s", file_path, e)
            return SearchFailure(kind=ErrorKind.FILE_ACCESS_ERROR, message=f"Error searching file: {e}")
        except Exception:
            logger.exception("Unexpected failure searching %s", file_path)
            return SearchFailure(kind=ErrorKind.UNKNOWN_ERROR, message=UNKNOWN_ERROR_MESSAGE)

        result = SearchResult(matches=find_matching_lines(content, keyword))
        logger.debug("Found %d matches in %s", result.total_matches, file_path)
        return result

    async def _read_text(self, file_path: str) -> str:
        if self.max_file_bytes is not None:
            file_stat = await aiofiles.os.stat(file_path)
            # non-regular files are left for open() to reject
            if stat.S_ISREG(file_stat.st_mode) and file_stat.st_size > self.max_file_bytes:
                raise OSError(
                    errno.EFBIG,
                    f"File is {file_stat.st_size} bytes, exceeding the {self.max_file_bytes} byte limit",
                    file_path,
                )

        # newline="" keeps \r\n intact so only \n splits lines
        async with aiofiles.open(file_path, "r", encoding=self.encoding, errors="replace", newline="") as file:
            return await file.read()
