from __future__ import annotations

import os

import pytest

from conftest import write
from playground_shell.context import ExecutionContext
from playground_shell.errors import UsageError
from playground_shell.lib.args import parse_line_count, split_flags
from playground_shell.lib.globbing import expand_operands, expand_pattern
from playground_shell.lib.listing import bounded_listing
from playground_shell.lib.walk import walk
from playground_shell.parser import GlobPattern


def test_split_flags() -> None:
    flags, ops = split_flags(["-rf", "a", "-", "--", "-b"], "rf", "rm")
    assert flags == {"r", "f"}
    assert ops == ["a", "-", "-b"]
    with pytest.raises(UsageError) as exc:
        split_flags(["-x"], "rf", "rm")
    assert exc.value.message == "rm: invalid option -- 'x'\n"


def test_parse_line_count() -> None:
    assert parse_line_count(["f"], "head") == (10, ["f"])
    assert parse_line_count(["-n", "4", "f"], "head") == (4, ["f"])
    assert parse_line_count(["-7"], "tail") == (7, [])


def test_bounded_listing() -> None:
    assert bounded_listing([], 3) == ""
    assert bounded_listing(["a", "b"], 3) == "a\nb\n"
    assert bounded_listing(["a", "b", "c", "d"], 2) == "a\nb\n... (2 more entries, 4 total)\n"


def test_walk_depth_and_kind(root: str) -> None:
    write(root, "a/b/c/d.txt")
    write(root, "top.txt")
    paths = [os.path.relpath(e.path, root) for e in walk(root, max_depth=2)]
    assert paths == ["a", "a/b", "top.txt"]
    files = [os.path.relpath(e.path, root) for e in walk(root, kind="file")]
    assert files == ["a/b/c/d.txt", "top.txt"]
    assert [e.path for e in walk(root, hard_limit=1)] == [os.path.join(root, "a"), os.path.join(root, "top.txt")]


def test_walk_missing_directory_is_empty(root: str) -> None:
    assert walk(os.path.join(root, "nope")) == []


def test_glob_relative_and_hidden(ctx: ExecutionContext, root: str) -> None:
    write(root, "a.py")
    write(root, "b.py")
    write(root, ".hidden.py")
    assert expand_pattern("*.py", ctx) == ["a.py", "b.py"]
    assert expand_pattern(".*.py", ctx) == [".hidden.py"]
    assert expand_pattern("./*.py", ctx) == ["./a.py", "./b.py"]
    assert expand_pattern(os.path.join(root, "*.py"), ctx) == [
        os.path.join(root, "a.py"),
        os.path.join(root, "b.py"),
    ]


def test_glob_never_leaves_the_boundary(ctx: ExecutionContext, outside: str) -> None:
    assert expand_pattern(os.path.join(outside, "*"), ctx) == [os.path.join(outside, "*")]
    assert expand_pattern("../*", ctx) == ["../*"]
    assert expand_pattern("$HOME/*", ctx) == ["$HOME/*"]


def test_glob_skips_symlinked_matches(ctx: ExecutionContext, root: str, outside: str) -> None:
    write(root, "real.txt")
    os.symlink(os.path.join(outside, "secret.txt"), os.path.join(root, "link.txt"))
    assert expand_pattern("*.txt", ctx) == ["real.txt"]


def test_expand_operands_only_touches_globs(ctx: ExecutionContext, root: str) -> None:
    write(root, "x.log")
    assert expand_operands(["*.log", GlobPattern("*.log")], ctx) == ["*.log", "x.log"]
