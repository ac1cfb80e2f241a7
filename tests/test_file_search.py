import asyncio

from file_search import (
    ErrorKind,
    FileSearchExecutor,
    LineMatch,
    SearchFailure,
    SearchResult,
    find_matching_lines,
)


def test_find_matching_lines_scenario():
    matches = find_matching_lines("apple\nbanana\napple pie", "apple")
    assert matches == [LineMatch(line=1, content="apple"), LineMatch(line=3, content="apple pie")]


def test_find_matching_lines_is_case_sensitive_and_literal():
    content = "Apple\napple\na.ple\n[apple]"
    assert [m.line for m in find_matching_lines(content, "apple")] == [2, 4]
    assert [m.line for m in find_matching_lines(content, "a.ple")] == [3]


def test_empty_keyword_matches_every_line():
    matches = find_matching_lines("one\ntwo\nthree", "")
    assert [(m.line, m.content) for m in matches] == [(1, "one"), (2, "two"), (3, "three")]


def test_empty_content_is_one_empty_line():
    assert find_matching_lines("", "") == [LineMatch(line=1, content="")]
    assert find_matching_lines("", "x") == []


def test_trailing_newline_yields_final_empty_line():
    matches = find_matching_lines("a\nb\n", "")
    assert [m.content for m in matches] == ["a", "b", ""]


def test_search_result_total_is_derived():
    result = SearchResult(matches=[LineMatch(line=2, content="x")], totalMatches=99)
    assert result.total_matches == 1
    assert result.to_payload() == {"matches": [{"line": 2, "content": "x"}], "totalMatches": 1}


async def test_search_returns_matches(fruit_file):
    result = await FileSearchExecutor().search(str(fruit_file), "apple")
    assert isinstance(result, SearchResult)
    assert result.to_payload() == {
        "matches": [{"line": 1, "content": "apple"}, {"line": 3, "content": "apple pie"}],
        "totalMatches": 2,
    }


async def test_search_without_matches_is_success(fruit_file):
    result = await FileSearchExecutor().search(str(fruit_file), "cherry")
    assert isinstance(result, SearchResult)
    assert result.to_payload() == {"matches": [], "totalMatches": 0}


async def test_search_is_idempotent_and_leaves_file_untouched(fruit_file):
    before = fruit_file.read_bytes()
    executor = FileSearchExecutor()
    first = await executor.search(str(fruit_file), "an")
    second = await executor.search(str(fruit_file), "an")
    assert first == second
    assert fruit_file.read_bytes() == before


async def test_line_numbers_strictly_increase(tmp_path):
    path = tmp_path / "many.txt"
    path.write_text("\n".join(f"row {i % 3}" for i in range(50)), encoding="utf-8")
    result = await FileSearchExecutor().search(str(path), "row 1")
    lines = [m.line for m in result.matches]
    assert lines == sorted(set(lines))
    assert lines[0] >= 1
    assert result.total_matches == len(result.matches) == 17


async def test_single_empty_line_with_empty_keyword(tmp_path):
    path = tmp_path / "empty.txt"
    path.write_text("", encoding="utf-8")
    result = await FileSearchExecutor().search(str(path), "")
    assert result.to_payload() == {"matches": [{"line": 1, "content": ""}], "totalMatches": 1}


async def test_carriage_returns_are_kept(tmp_path):
    path = tmp_path / "windows.txt"
    path.write_bytes(b"first line\r\nsecond line\r\n")
    result = await FileSearchExecutor().search(str(path), "line")
    assert [m.content for m in result.matches] == ["first line\r", "second line\r"]


async def test_undecodable_bytes_are_replaced(tmp_path):
    path = tmp_path / "latin1.txt"
    path.write_bytes(b"caf\xe9 au lait\nthe end")
    result = await FileSearchExecutor().search(str(path), "lait")
    assert result.matches == [LineMatch(line=1, content="caf\ufffd au lait")]


async def test_missing_file_is_file_access_error():
    result = await FileSearchExecutor().search("/no/such/file.txt", "apple")
    assert isinstance(result, SearchFailure)
    assert result.kind == ErrorKind.FILE_ACCESS_ERROR
    assert result.message.startswith("Error searching file: ")
    assert "No such file or directory" in result.message


async def test_directory_is_file_access_error(tmp_path):
    result = await FileSearchExecutor().search(str(tmp_path), "apple")
    assert isinstance(result, SearchFailure)
    assert result.kind == ErrorKind.FILE_ACCESS_ERROR


async def test_file_over_size_limit_is_rejected(fruit_file):
    result = await FileSearchExecutor(max_file_bytes=5).search(str(fruit_file), "apple")
    assert isinstance(result, SearchFailure)
    assert result.kind == ErrorKind.FILE_ACCESS_ERROR
    assert "byte limit" in result.message


async def test_file_within_size_limit_is_searched(fruit_file):
    result = await FileSearchExecutor(max_file_bytes=1024).search(str(fruit_file), "banana")
    assert result.matches == [LineMatch(line=2, content="banana")]


async def test_read_timeout_is_file_access_error(monkeypatch, fruit_file):
    async def slow_read(self, file_path):
        await asyncio.sleep(1)
        return ""

    monkeypatch.setattr(FileSearchExecutor, "_read_text", slow_read)
    result = await FileSearchExecutor(read_timeout=0.01).search(str(fruit_file), "apple")
    assert isinstance(result, SearchFailure)
    assert result.kind == ErrorKind.FILE_ACCESS_ERROR
    assert "timed out" in result.message


async def test_unexpected_failure_is_unknown_error(monkeypatch, fruit_file):
    async def broken_read(self, file_path):
        raise RuntimeError("boom")

    monkeypatch.setattr(FileSearchExecutor, "_read_text", broken_read)
    result = await FileSearchExecutor().search(str(fruit_file), "apple")
    assert result == SearchFailure(
        kind=ErrorKind.UNKNOWN_ERROR,
        message="An unknown error occurred while searching the file",
    )
    assert result.describe() == "UnknownError: An unknown error occurred while searching the file"


async def test_directory_with_size_limit_reports_directory(tmp_path):
    result = await FileSearchExecutor(max_file_bytes=1).search(str(tmp_path), "apple")
    assert isinstance(result, SearchFailure)
    assert result.kind == ErrorKind.FILE_ACCESS_ERROR
    assert "Is a directory" in result.message


async def test_search_log_omits_keyword(caplog, fruit_file):
    with caplog.at_level("DEBUG", logger="file_search"):
        await FileSearchExecutor().search(str(fruit_file), "banana")
    assert "Found 1 matches in" in caplog.text
    assert "banana" not in caplog.text
