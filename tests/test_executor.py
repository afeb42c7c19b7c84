"""Tests for spawning external programs with pipes and redirects."""

import io
import sys
import time

from conftest import BIN_DIR, needs
from shellfyre.command import Status
from shellfyre.executor import execute_pipeline, open_file, resolve_program
from shellfyre.job_control import JobTable
from shellfyre.parser import parse_command


def execute(line, **kwargs):
    kwargs.setdefault("bin_dir", BIN_DIR)
    return execute_pipeline(parse_command(line), **kwargs)


class TestResolveProgram:

    def test_executable_in_bin_dir(self, make_program) -> None:
        path = make_program("hello", "echo hi")
        assert resolve_program("hello", make_program.bin_dir) == path

    def test_missing_program(self, make_program) -> None:
        assert resolve_program("nope", make_program.bin_dir) is None

    def test_not_executable(self, make_program) -> None:
        make_program("plain", "echo hi", mode=0o644)
        assert resolve_program("plain", make_program.bin_dir) is None

    def test_paths_are_not_searched(self, make_program) -> None:
        make_program("hello", "echo hi")
        assert resolve_program("../bin/hello", make_program.bin_dir) is None
        assert resolve_program("", make_program.bin_dir) is None


@needs("echo", "cat", "tr")
class TestRedirects:

    def test_stdout_creates_and_truncates(self, workdir) -> None:
        (workdir / "out.txt").write_text("old contents\n")
        assert execute("echo hello > out.txt") is Status.SUCCESS
        assert (workdir / "out.txt").read_text() == "hello\n"

    def test_append(self, workdir) -> None:
        execute("echo one >out.txt")
        execute("echo two >> out.txt")
        assert (workdir / "out.txt").read_text() == "one\ntwo\n"

    def test_stdin_and_stdout(self, workdir) -> None:
        (workdir / "in.txt").write_text("abc\n")
        execute("tr a-z A-Z < in.txt > out.txt")
        assert (workdir / "out.txt").read_text() == "ABC\n"

    def test_missing_stdin_target(self, workdir, capsys) -> None:
        assert execute("cat < missing.txt") is Status.UNKNOWN
        assert "missing.txt" in capsys.readouterr().out

    def test_stdout_and_append_both_set(self, workdir) -> None:
        (workdir / "a.txt").write_text("old\n")
        (workdir / "b.txt").write_text("kept\n")
        execute("echo new >a.txt >>b.txt")
        assert (workdir / "a.txt").read_text() == ""
        assert (workdir / "b.txt").read_text() == "kept\nnew\n"


@needs("echo", "cat", "tr")
class TestPipelines:

    def test_two_stages(self, workdir) -> None:
        assert execute("echo hello world | tr a-z A-Z > out.txt") is Status.SUCCESS
        assert (workdir / "out.txt").read_text() == "HELLO WORLD\n"

    def test_three_stages(self, workdir) -> None:
        (workdir / "in.txt").write_text("foo\n")
        execute("cat < in.txt | tr a-z A-Z | tr -d O > out.txt")
        assert (workdir / "out.txt").read_text() == "F\n"

    def test_explicit_redirect_beats_pipe(self, workdir) -> None:
        execute("echo hi > mid.txt | cat > out.txt")
        assert (workdir / "mid.txt").read_text() == "hi\n"
        assert (workdir / "out.txt").read_text() == ""

    def test_missing_stage_does_not_block_the_rest(self, workdir, capsys) -> None:
        assert execute("no-such-program-xyz | cat > out.txt") is Status.UNKNOWN
        assert (workdir / "out.txt").read_text() == ""
        assert "no-such-program-xyz: command not found" in capsys.readouterr().out


class TestCommandNotFound:

    def test_nothing_spawned(self, workdir, capsys) -> None:
        assert execute("no-such-program-xyz arg") is Status.UNKNOWN
        assert capsys.readouterr().out == "shellfyre: no-such-program-xyz: command not found\n"

    def test_exit_127_reported(self, workdir, make_program, capsys) -> None:
        make_program("wrapper", "exit 127")
        execute("wrapper", bin_dir=make_program.bin_dir)
        assert "wrapper: command not found" in capsys.readouterr().out

    def test_other_exit_status_is_not_the_shell_result(self, workdir, make_program, capsys) -> None:
        make_program("failing", "exit 3")
        assert execute("failing", bin_dir=make_program.bin_dir) is Status.SUCCESS
        assert capsys.readouterr().out == ""

    def test_arguments_are_passed_in_order(self, workdir, make_program) -> None:
        make_program("args", 'for a in "$@"; do echo "$a"; done')
        execute("args one 'two' three > out.txt", bin_dir=make_program.bin_dir)
        assert (workdir / "out.txt").read_text() == "one\ntwo\nthree\n"

    def test_no_redirect_opened_for_missing_program(self, workdir) -> None:
        execute("no-such-program-xyz > out.txt")
        assert not (workdir / "out.txt").exists()


@needs("sleep")
class TestBackground:

    def test_returns_without_waiting(self, workdir, capsys) -> None:
        jobs = JobTable()
        start = time.monotonic()
        assert execute("sleep 2 &", jobs=jobs) is Status.SUCCESS
        assert time.monotonic() - start < 1.5
        assert len(jobs) == 1

        (proc, cmdline), = jobs.jobs.values()
        assert proc.returncode is None
        assert cmdline == "sleep 2"
        assert f"[{proc.pid}] started in background" in capsys.readouterr().out
        proc.kill()
        proc.wait()


class TestOpenFile:

    def test_opener_receives_the_name(self, workdir, make_program) -> None:
        make_program("xdg-open", f'echo "$1" > {workdir}/opened.txt')
        assert open_file("notes.txt", bin_dir=make_program.bin_dir) is Status.SUCCESS
        assert (workdir / "opened.txt").read_text() == "notes.txt\n"

    def test_missing_opener(self, workdir, make_program, capsys) -> None:
        assert open_file("notes.txt", bin_dir=make_program.bin_dir) is Status.UNKNOWN
        assert "xdg-open: command not found" in capsys.readouterr().out


@needs("sleep", "true")
class TestStageOrdering:

    def test_only_the_last_stage_is_waited_for(self, workdir) -> None:
        start = time.monotonic()
        assert execute("sleep 2 | true") is Status.SUCCESS
        assert time.monotonic() - start < 1.5


@needs("echo", "cat")
class TestBackgroundPipeline:

    def test_last_stage_is_the_job(self, workdir, capsys) -> None:
        jobs = JobTable()
        start = time.monotonic()
        assert execute("echo x | cat > out.txt &", jobs=jobs) is Status.SUCCESS
        assert time.monotonic() - start < 1.0

        (proc, cmdline), = jobs.jobs.values()
        assert proc.args[0] == f"{BIN_DIR}/cat"
        assert cmdline == "echo x | cat >out.txt"
        proc.wait()
        assert (workdir / "out.txt").read_text() == "x\n"


class RecordingStdout(io.StringIO):
    """Remembers what had been written each time it was flushed."""

    def __init__(self):
        super().__init__()
        self.flushed = []

    def flush(self):
        self.flushed.append(self.getvalue())


@needs("echo")
class TestOutputOrdering:

    def test_messages_flushed_before_spawn(self, workdir, monkeypatch) -> None:
        out = RecordingStdout()
        monkeypatch.setattr(sys, "stdout", out)
        execute("no-such-program-xyz | echo hi > out.txt")
        assert any("no-such-program-xyz: command not found" in text for text in out.flushed)
