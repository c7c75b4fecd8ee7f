from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest

from pymodgen.scan.files import _build_gitignore_matcher, find_source_files

if TYPE_CHECKING:
    from pathlib import Path


@pytest.mark.skipif(
    os.name == "nt",
    reason="Symlink semantics vary on Windows test runners.",
)
def test_find_source_files_skips_symlinked_dirs(tmp_path: Path) -> None:
    tree_root = tmp_path / "tree"
    tree_root.mkdir()
    (tree_root / "pkg").mkdir()
    (tree_root / "pkg" / "module.py").write_text("print('ok')\n", encoding="utf-8")

    external_root = tmp_path / "external"
    external_root.mkdir()
    (external_root / "leak.py").write_text("print('leak')\n", encoding="utf-8")

    symlink_dir = tree_root / "linked"
    symlink_dir.symlink_to(external_root, target_is_directory=True)

    results = [
        path.relative_to(tree_root).as_posix() for path in find_source_files(tree_root)
    ]

    assert "pkg/module.py" in results
    assert "linked/leak.py" not in results


@pytest.mark.skipif(
    os.name == "nt",
    reason="Symlink semantics vary on Windows test runners.",
)
def test_nested_gitignore_skips_symlinked_gitignore(tmp_path: Path) -> None:
    tree_root = tmp_path / "tree"
    tree_root.mkdir()
    (tree_root / "pkg").mkdir()
    (tree_root / "pkg" / "module.py").write_text("print('ok')\n", encoding="utf-8")
    (tree_root / ".gitignore").write_text("*.bin\n", encoding="utf-8")

    external_root = tmp_path / "external"
    external_root.mkdir()
    (external_root / "outside.gitignore").write_text(
        "pkg/module.py\n", encoding="utf-8"
    )

    symlink_gitignore = tree_root / "linked.gitignore"
    symlink_gitignore.symlink_to(external_root / "outside.gitignore")

    matcher = _build_gitignore_matcher(tree_root, nested_gitignore=True)
    assert matcher is not None
    assert matcher(str(tree_root / "pkg" / "module.py")) is False


def test_find_source_files_skips_output_dir_and_sorts(tmp_path: Path) -> None:
    (tmp_path / "b").mkdir()
    (tmp_path / "b" / "z.py").write_text("", encoding="utf-8")
    (tmp_path / "a.py").write_text("", encoding="utf-8")
    (tmp_path / ".pymodgen").mkdir()
    (tmp_path / ".pymodgen" / "a.py").write_text("", encoding="utf-8")
    (tmp_path / "notes.txt").write_text("", encoding="utf-8")

    results = [
        path.relative_to(tmp_path).as_posix() for path in find_source_files(tmp_path)
    ]

    assert results == ["a.py", "b/z.py"]


def test_find_source_files_applies_include_and_exclude(tmp_path: Path) -> None:
    (tmp_path / "src").mkdir()
    (tmp_path / "src" / "keep.py").write_text("", encoding="utf-8")
    (tmp_path / "src" / "skip_test.py").write_text("", encoding="utf-8")
    (tmp_path / "other.py").write_text("", encoding="utf-8")

    results = [
        path.relative_to(tmp_path).as_posix()
        for path in find_source_files(
            tmp_path,
            include_patterns=["src/*"],
            exclude_patterns=["*_test.py"],
        )
    ]

    assert results == ["src/keep.py"]


def test_find_source_files_honors_root_gitignore(tmp_path: Path) -> None:
    (tmp_path / ".gitignore").write_text("generated/\n", encoding="utf-8")
    (tmp_path / "generated").mkdir()
    (tmp_path / "generated" / "out.py").write_text("", encoding="utf-8")
    (tmp_path / "mod.py").write_text("", encoding="utf-8")

    results = [
        path.relative_to(tmp_path).as_posix() for path in find_source_files(tmp_path)
    ]

    assert results == ["mod.py"]


def test_find_source_files_skips_nested_output_dir_only(tmp_path: Path) -> None:
    (tmp_path / "build" / "gen").mkdir(parents=True)
    (tmp_path / "build" / "gen" / "old.py").write_text("", encoding="utf-8")
    (tmp_path / "build" / "hooks.py").write_text("", encoding="utf-8")

    results = [
        path.relative_to(tmp_path).as_posix()
        for path in find_source_files(tmp_path, output_dir="build/gen")
    ]

    assert results == ["build/hooks.py"]
