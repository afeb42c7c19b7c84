import logging
import os
import subprocess
import sys

from shellfyre.command import Status
from shellfyre.config import BIN_DIR, OPENER, SHELL_NAME

logger = logging.getLogger(__name__)

# exit status conventionally used by exec wrappers for a missing program
NOT_FOUND = 127


def resolve_program(name, bin_dir=BIN_DIR):
    """
    Look the program up in the single system binary directory.
    Returns: absolute path or None
    """
    if not name or "/" in name:
        return None
    path = os.path.join(bin_dir, name)
    if os.path.isfile(path) and os.access(path, os.X_OK):
        return path
    return None


def command_not_found(name):
    print(f"{SHELL_NAME}: {name}: command not found")


def run_external(name, argv, stdin=None, stdout=None, background=False):
    """
    Spawn one program.
    Background programs get their own process group so Ctrl+C at the
    prompt does not reach them.
    Returns: Popen object or None
    """
    # earlier shell messages must precede the child output
    sys.stdout.flush()
    try:
        return subprocess.Popen(
            argv,
            stdin=stdin,
            stdout=stdout,
            preexec_fn=os.setpgrp if background else None
        )
    except PermissionError:
        print(f"{SHELL_NAME}: permission denied: {name}")
    except FileNotFoundError:
        command_not_found(name)
    except OSError as e:
        print(f"{SHELL_NAME}: failed to execute '{name}': {e.strerror}")
    return None


def open_redirects(cmd, opened_files):
    """
    Open the redirect targets of one stage.
    Every opened file is appended to `opened_files` so the caller can close it.
    Returns: (stdin file or None, stdout file or None)
    Raises: OSError when a target cannot be opened
    """
    stdin_f = stdout_f = None
    if cmd.stdin is not None:
        stdin_f = open(os.path.expanduser(cmd.stdin), "rb")
        opened_files.append(stdin_f)
    if cmd.stdout is not None:
        stdout_f = open(os.path.expanduser(cmd.stdout), "wb")
        opened_files.append(stdout_f)
    # `>a >>b`: a is still truncated, output goes to b
    if cmd.append is not None:
        stdout_f = open(os.path.expanduser(cmd.append), "ab")
        opened_files.append(stdout_f)
    return stdin_f, stdout_f


def wait_foreground(proc):
    try:
        return proc.wait()
    except KeyboardInterrupt:
        # the child shares our process group and got the SIGINT too
        print()
        return proc.wait()


def execute_pipeline(stages, jobs=None, bin_dir=BIN_DIR):
    """
    Execute a pipeline of Command stages.
    Every stage is spawned before anything is waited on; only the last
    stage is waited for, and only in the foreground.
    Returns: Status.SUCCESS, or Status.UNKNOWN when some stage could not be started
    """
    procs, opened_files, pipe_fds = [], [], []
    status = Status.SUCCESS
    background = stages[-1].background
    last = len(stages) - 1
    terminal = None
    read_end = None

    try:
        for idx, cmd in enumerate(stages):
            stdin, stdout = read_end, None
            read_end = None
            if idx < last:
                read_end, write_end = os.pipe()
                pipe_fds.extend((read_end, write_end))
                stdout = write_end

            if not cmd.name:
                continue

            path = resolve_program(cmd.name, bin_dir)
            if path is None:
                command_not_found(cmd.name)
                status = Status.UNKNOWN
                continue

            try:
                stdin_f, stdout_f = open_redirects(cmd, opened_files)
            except OSError as e:
                print(f"{SHELL_NAME}: {e.filename}: {e.strerror}")
                status = Status.UNKNOWN
                continue

            # explicit redirects win over the pipe
            if stdin_f is not None:
                stdin = stdin_f
            if stdout_f is not None:
                stdout = stdout_f

            p = run_external(cmd.name, [path] + cmd.args,
                             stdin=stdin, stdout=stdout, background=background)
            if p is None:
                status = Status.UNKNOWN
                continue

            logger.debug("stage %d: %s pid=%d", idx, path, p.pid)
            procs.append(p)
            if idx == last:
                terminal = p
    finally:
        # the parent must drop its pipe ends, otherwise readers never see EOF
        for fd in pipe_fds:
            os.close(fd)
        for f in opened_files:
            f.close()

    if background:
        if terminal is not None and jobs is not None:
            jobs.add(terminal, " | ".join(str(c) for c in stages))
        return status

    if terminal is not None:
        exit_code = wait_foreground(terminal)
        logger.debug("pid %d exited with %d", terminal.pid, exit_code)
        if exit_code == NOT_FOUND:
            command_not_found(stages[-1].name)
            status = Status.UNKNOWN

    return status


def open_file(name, bin_dir=BIN_DIR):
    """Open a file with the desktop opener and wait for it."""
    path = resolve_program(OPENER, bin_dir)
    if path is None:
        command_not_found(OPENER)
        return Status.UNKNOWN

    p = run_external(OPENER, [path, name])
    if p is None:
        return Status.UNKNOWN
    p.wait()
    return Status.SUCCESS
