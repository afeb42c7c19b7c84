import logging
import operator
import os
import sys
from datetime import datetime, timezone

from shellfyre.command import Status
from shellfyre.config import SHELL_NAME
from shellfyre.executor import open_file

logger = logging.getLogger(__name__)

OPERATIONS = {
    "+": operator.add,
    "-": operator.sub,
    "*": operator.mul,
    "/": operator.truediv,
}

PERMISSIONS = ((os.R_OK, "read"), (os.W_OK, "write"), (os.X_OK, "execute"))

# "" (blank line) maps to builtin_noop, the rest to builtin_<name>
BUILTIN_NAMES = ("", "exit", "cd", "cdh", "filesearch", "fileproperties", "manual", "basiccalculator")


def format_timestamp(ts):
    """UTC, day-month-year and hour:minute:second."""
    return datetime.fromtimestamp(ts, tz=timezone.utc).strftime("%d-%m-%Y, time: %H:%M:%S")


def scan_directory(pattern, directory):
    try:
        names = sorted(os.listdir(directory))
    except OSError as e:
        logger.debug("cannot list %s: %s", directory, e)
        return []
    return [os.path.join(directory, name) for name in names if pattern in name]


def find_files(pattern):
    """
    Entries whose name contains `pattern`: the current directory tree,
    recursively, followed by the parent directory one level deep.
    """
    matches = []
    for dirpath, dirnames, filenames in os.walk(os.curdir):
        dirnames.sort()
        for name in sorted(dirnames + filenames):
            if pattern in name:
                matches.append(os.path.join(dirpath, name))
    matches.extend(scan_directory(pattern, os.pardir))
    return matches


class Builtins:
    """
    Commands that run inside the shell process.
    `history` is the DirectoryHistory the shell was started with,
    `read_input` supplies answers to interactive questions and
    `opener` is called with each path `filesearch -o` wants opened.
    """

    def __init__(self, history, read_input=input, opener=open_file):
        self.history = history
        self.read_input = read_input
        self.opener = opener
        self.handlers = {name: getattr(self, f"builtin_{name or 'noop'}") for name in BUILTIN_NAMES}

    def __contains__(self, name):
        return name in self.handlers

    def dispatch(self, stages):
        """
        Run the first stage if it names a builtin.
        Returns: Status.SUCCESS / Status.EXIT, or Status.UNKNOWN when the
        stage is not a builtin and belongs to the executor
        """
        cmd = stages[0]
        handler = self.handlers.get(cmd.name)
        if handler is None:
            return Status.UNKNOWN
        if len(stages) > 1:
            logger.warning("%s: builtin '%s' cannot be piped, ignoring %d stage(s)",
                           SHELL_NAME, cmd.name, len(stages) - 1)
        return handler(cmd.args)

    def ask(self, question):
        try:
            return self.read_input(question).strip()
        except EOFError:
            print()
            return None

    def builtin_noop(self, args):
        return Status.SUCCESS

    def builtin_exit(self, args):
        return Status.EXIT

    def builtin_cd(self, args):
        """Change directory"""
        path = args[0] if args else os.path.expanduser("~")
        return self.change_directory(path, "cd")

    def change_directory(self, path, name):
        try:
            os.chdir(os.path.expanduser(path))
        except OSError as e:
            print(f"{SHELL_NAME}: {name}: {path}: {e.strerror}")
            return Status.SUCCESS

        try:
            self.history.record(os.getcwd())
        except OSError as e:
            print(f"Warning: Could not save directory history: {e}", file=sys.stderr)
        return Status.SUCCESS

    def builtin_cdh(self, args):
        """Show recent directories and jump to the chosen one"""
        try:
            entries = self.history.load()[-self.history.limit:]
        except OSError as e:
            print(f"{SHELL_NAME}: cdh: {e.strerror}")
            return Status.SUCCESS
        if not entries:
            print("No directory history.")
            return Status.SUCCESS

        size = len(entries)
        for i in reversed(range(size)):
            print(f"{chr(ord('a') + i)}  {i + 1})  {entries[i]}")

        choice = self.ask("Select directory by letter or number: ")
        index = selection_index(choice, size)
        if index is None:
            logger.debug("cdh: ignoring selection %r", choice)
            return Status.SUCCESS
        return self.change_directory(entries[index], "cdh")

    def builtin_filesearch(self, args):
        """Find entries by name substring; -r prints them, -o opens them"""
        if len(args) == 1:
            for path in scan_directory(args[0], os.curdir):
                print(f"  {path}")
            return Status.SUCCESS

        if len(args) not in (2, 3):
            print("Please enter valid input.")
            return Status.SUCCESS

        flags = args[:-1]
        if len(set(flags)) != len(flags) or not set(flags) <= {"-r", "-o"}:
            print("Command not found.")
            return Status.SUCCESS

        show, open_matches = "-r" in flags, "-o" in flags
        for path in find_files(args[-1]):
            if show:
                print(f"  {path}")
            if open_matches:
                self.opener(path)
        return Status.SUCCESS

    def builtin_fileproperties(self, args):
        """Print permissions, size and timestamps of a file"""
        name = self.ask("Enter file name: ")
        if name is None:
            return Status.SUCCESS
        try:
            st = os.stat(name)
        except OSError:
            print("File can not find.")
            return Status.SUCCESS

        granted = [label for flag, label in PERMISSIONS if os.access(name, flag)]
        print(f"File access permission: {' '.join(granted)}")
        print(f"File size: {st.st_size}")
        print(f"Created date: {format_timestamp(st.st_ctime)}")
        print(f"Modified date: {format_timestamp(st.st_mtime)}")
        return Status.SUCCESS

    def builtin_manual(self, args):
        topic = args[0] if args else None
        if topic not in ("pwd", "ls"):
            print("usage: manual <pwd|ls>")
            return Status.SUCCESS
        try:
            if topic == "pwd":
                print(os.getcwd())
            else:
                print("".join(f"  {name}" for name in sorted(os.listdir(os.curdir))))
        except OSError as e:
            print(f"{SHELL_NAME}: manual: {e.strerror}")
        return Status.SUCCESS

    def builtin_basiccalculator(self, args):
        if len(args) != 3:
            print("order for op:  basiccalculator <number1> <operator> <number2>")
            print("operators : +, -, *, /.")
            return Status.SUCCESS

        left, op, right = args
        try:
            a, b = float(left), float(right)
        except ValueError:
            print("Error! operands must be numbers")
            return Status.SUCCESS

        func = OPERATIONS.get(op)
        if func is None:
            print("Error! operator is not correct")
        elif op == "/" and b == 0:
            print("Error! division by zero")
        else:
            print(f"{a:.1f} {op} {b:.1f} = {func(a, b):.1f}")
        return Status.SUCCESS


def selection_index(choice, size):
    """
    Map a cdh answer to a history index (0 = oldest).
    Letters start at 'a' for the oldest entry, numbers at 1.
    """
    if not choice:
        return None
    if len(choice) == 1 and "a" <= choice < chr(ord("a") + size):
        return ord(choice) - ord("a")
    if choice.isdecimal() and 1 <= int(choice) <= size:
        return int(choice) - 1
    return None
