from __future__ import annotations

import os
from pathlib import Path

import pytest

from playground_shell.boundary import BoundarySet
from playground_shell.context import ExecutionContext
from playground_shell.shell import PlaygroundShell


@pytest.fixture
def root(tmp_path: Path) -> str:
    r = tmp_path / "sandbox"
    r.mkdir()
    return os.path.realpath(str(r))


@pytest.fixture
def outside(tmp_path: Path) -> str:
    o = tmp_path / "outside"
    o.mkdir()
    (o / "secret.txt").write_text("top secret\n", encoding="utf-8")
    return os.path.realpath(str(o))


@pytest.fixture
def boundaries(root: str) -> BoundarySet:
    return BoundarySet.create([root])


@pytest.fixture
def ctx(boundaries: BoundarySet) -> ExecutionContext:
    return ExecutionContext.at_home(boundaries)


@pytest.fixture
def shell(boundaries: BoundarySet) -> PlaygroundShell:
    return PlaygroundShell(boundaries)


def write(root: str, rel: str, content: str = "") -> str:
    p = os.path.join(root, rel)
    os.makedirs(os.path.dirname(p), exist_ok=True)
    with open(p, "w", encoding="utf-8") as f:
        f.write(content)
    return p
