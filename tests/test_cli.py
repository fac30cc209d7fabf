from __future__ import annotations

import io
import json
import os
from pathlib import Path

import pytest

from playground_shell import __version__
from playground_shell.cli import main


@pytest.fixture
def config(root: str, tmp_path: Path) -> str:
    p = tmp_path / "playground.yaml"
    p.write_text(f"sandbox:\n  roots: ['{root}']\n", encoding="utf-8")
    return str(p)


def test_version(capsys) -> None:
    assert main(["version"]) == 0
    assert capsys.readouterr().out.strip() == __version__


def test_execute_success(config: str, capsys) -> None:
    assert main(["--config", config, "execute", "echo hi | grep h"]) == 0
    assert capsys.readouterr().out == "hi\n"


def test_execute_joins_unquoted_words(config: str, capsys) -> None:
    assert main(["--config", config, "execute", "echo", "a", "b"]) == 0
    assert capsys.readouterr().out == "a b\n"


def test_execute_failure_goes_to_stderr(config: str, capsys) -> None:
    assert main(["--config", config, "execute", "ls /etc"]) == 1
    captured = capsys.readouterr()
    assert captured.out == ""
    assert captured.err == "ls: /etc: No such file or directory\n"


def test_validate_path(config: str, root: str, capsys) -> None:
    assert main(["--config", config, "validate-path", "src/../a.txt"]) == 0
    assert capsys.readouterr().out.strip() == os.path.join(root, "a.txt")
    assert main(["--config", config, "validate-path", "/etc/passwd"]) == 1
    assert capsys.readouterr().out == ""


def test_audit_log_flag(config: str, tmp_path: Path) -> None:
    audit = tmp_path / "audit.jsonl"
    main(["--config", config, "--audit-log", str(audit), "execute", "cat /etc/shadow"])
    (event,) = [json.loads(line) for line in audit.read_text().splitlines()]
    assert event["denial"] == "outside_boundary"


def test_bad_config_exits_2(tmp_path: Path, capsys) -> None:
    p = tmp_path / "playground.yaml"
    p.write_text("sandbox:\n  roots: ['/definitely/not/here']\n", encoding="utf-8")
    assert main(["--config", str(p), "execute", "ls"]) == 2
    assert "does not exist" in capsys.readouterr().err


def test_repl_keeps_cwd(config: str, root: str, monkeypatch, capsys) -> None:
    os.mkdir(os.path.join(root, "sub"))
    monkeypatch.setattr("sys.stdin", io.StringIO("cd sub\npwd\ncat nope\nexit\n"))
    assert main(["--config", config, "repl"]) == 0
    captured = capsys.readouterr()
    assert os.path.join(root, "sub") + "\n" in captured.out
    assert "cat: nope: No such file or directory\n" in captured.err
