from __future__ import annotations

from pathlib import Path

import pytest

from credit_ledger.errors import InvalidArgument
from credit_ledger.services.code_source_service import (
    normalize_value,
    parse_code_metadata,
    read_code_from_file,
    read_whole_file,
)

SOURCE = """/**
 * @author: Alice Example
 * @version: 1.2
 */
int main() {
    return 0;
}
"""


@pytest.fixture
def source_file(tmp_path: Path) -> Path:
    path = tmp_path / "main.cpp"
    path.write_text(SOURCE, encoding="utf-8")
    return path


def test_read_code_from_file_is_zero_based_inclusive(source_file: Path) -> None:
    assert read_code_from_file(source_file, 4, 6) == "int main() {\n    return 0;\n}\n"
    assert read_code_from_file(source_file, 0, 0) == "/**\n"


def test_read_code_from_file_rejects_bad_ranges(source_file: Path, tmp_path: Path) -> None:
    assert read_code_from_file(source_file, 5, 4) is None
    assert read_code_from_file(source_file, -1, 2) is None
    assert read_code_from_file(tmp_path / "missing.cpp", 0, 1) is None


def test_read_whole_file(source_file: Path, tmp_path: Path) -> None:
    assert read_whole_file(source_file) == SOURCE
    assert read_whole_file(tmp_path / "missing.cpp") is None


def test_parse_code_metadata(source_file: Path, tmp_path: Path) -> None:
    assert parse_code_metadata(source_file) == {"author": "Alice Example", "version": "1.2"}
    assert parse_code_metadata(tmp_path / "missing.cpp") == {}


def test_normalize_value() -> None:
    assert normalize_value(5, 0, 10) == pytest.approx(0.5)
    assert normalize_value(-3, 0, 10) == 0.0
    assert normalize_value(30, 0, 10) == 1.0
    with pytest.raises(InvalidArgument):
        normalize_value(1, 2, 2)
