from __future__ import annotations

from pathlib import Path

import pytest

from oddments.core.exceptions import BadDirectoryTreeKeyError, BadDirectoryTreeValueError
from oddments.core.fileutil.tree import make_directory_tree, walk
from helpers.files import dir_to_dict


def test_make_directory_tree_round_trips(tmp_path: Path) -> None:
    tree = {
        "bmc": {
            "moe": {"a": "aaaaaaaaaa", "b": "bbbbbbbbb"},
            "larry": "larry",
            "curley": "curley",
        }
    }

    result = make_directory_tree(tmp_path, tree)

    assert result == tmp_path
    assert dir_to_dict(tmp_path) == tree


def test_iterable_and_bytes_contents(tmp_path: Path) -> None:
    make_directory_tree(tmp_path / "out", {"lines": ["a\n", "b\n", 3], "blob": b"\x00\x01", "empty": {}})

    assert (tmp_path / "out" / "lines").read_text(encoding="utf-8") == "a\nb\n3"
    assert (tmp_path / "out" / "blob").read_bytes() == b"\x00\x01"
    assert (tmp_path / "out" / "empty").is_dir()


def test_key_with_separator_is_rejected(tmp_path: Path) -> None:
    with pytest.raises(BadDirectoryTreeKeyError):
        make_directory_tree(tmp_path, {"a/b": "x"})


def test_unsupported_value_is_rejected(tmp_path: Path) -> None:
    with pytest.raises(BadDirectoryTreeValueError) as exc:
        make_directory_tree(tmp_path, {"num": 42})

    assert "num" in str(exc.value)


def test_existing_file_is_not_a_directory(tmp_path: Path) -> None:
    target = tmp_path / "file"
    target.write_text("x", encoding="utf-8")

    with pytest.raises(BadDirectoryTreeKeyError):
        make_directory_tree(target, {"a": "b"})


def test_walk_is_pre_order_and_sorted(tmp_path: Path) -> None:
    make_directory_tree(tmp_path, {"b": {}, "a": {"x": {"deep": {}}, "f.txt": "f"}, "top.txt": "t"})
    seen: list[str] = []

    walk(tmp_path, lambda d: seen.append(d.relative_to(tmp_path).as_posix()))

    assert seen == [".", "a", "a/x", "a/x/deep", "b"]


def test_walk_prunes_when_visit_returns_false(tmp_path: Path) -> None:
    make_directory_tree(tmp_path, {"a": {"x": {}}, "b": {"y": {}}})
    seen: list[str] = []

    def visit(d: Path) -> bool:
        seen.append(d.name)
        return d.name != "a"

    walk(tmp_path, visit)

    assert seen == [tmp_path.name, "a", "b", "y"]
