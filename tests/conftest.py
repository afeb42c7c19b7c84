import os

import pytest

from shellfyre.builtin import Builtins
from shellfyre.history import DirectoryHistory

BIN_DIR = "/usr/bin"


def needs(*programs):
    """Skip a test when one of the /usr/bin programs it spawns is missing."""
    missing = [p for p in programs if not os.access(os.path.join(BIN_DIR, p), os.X_OK)]
    return pytest.mark.skipif(bool(missing), reason=f"missing {', '.join(missing)} in {BIN_DIR}")


def scripted(*answers):
    """A read_input replacement returning the given answers, then EOF."""
    pending = list(answers)

    def read_input(question=""):
        if not pending:
            raise EOFError
        return pending.pop(0)

    return read_input


@pytest.fixture
def workdir(tmp_path, monkeypatch):
    """A fresh current directory inside tmp_path, restored after the test."""
    work = tmp_path / "work"
    work.mkdir()
    monkeypatch.chdir(work)
    return work


@pytest.fixture
def history(tmp_path):
    return DirectoryHistory(str(tmp_path / "history.txt"))


@pytest.fixture
def opened():
    return []


@pytest.fixture
def builtins(history, opened):
    return Builtins(history, read_input=scripted(), opener=opened.append)


@pytest.fixture
def make_program(tmp_path):
    """Write an executable shell script into a private bin directory."""
    bin_dir = tmp_path / "bin"
    bin_dir.mkdir()

    def make(name, body, mode=0o755):
        path = bin_dir / name
        path.write_text(f"#!/bin/sh\n{body}\n")
        path.chmod(mode)
        return str(path)

    make.bin_dir = str(bin_dir)
    return make

