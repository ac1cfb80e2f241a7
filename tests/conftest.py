import pytest


@pytest.fixture
def fruit_file(tmp_path):
    path = tmp_path / "fruit.txt"
    path.write_text("apple\nbanana\napple pie", encoding="utf-8")
    return path
