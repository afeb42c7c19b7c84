import os
import readline
import sys

from shellfyre.builtin import BUILTIN_NAMES
from shellfyre.config import BIN_DIR


class ShellCompleter:
    """Builtins and programs in BIN_DIR for the first word, file names after it."""

    def __init__(self, bin_dir=BIN_DIR):
        self.commands = self._collect_commands(bin_dir)
        self.matches = []

    def _collect_commands(self, bin_dir):
        commands = {name for name in BUILTIN_NAMES if name}
        try:
            with os.scandir(bin_dir) as entries:
                for entry in entries:
                    if entry.is_file() and os.access(entry.path, os.X_OK):
                        commands.add(entry.name)
        except OSError:
            pass
        return sorted(commands)

    def candidates(self, text, is_command):
        if is_command:
            return [c + " " for c in self.commands if c.startswith(text)]

        dirname, partial = os.path.split(text)
        search_dir = dirname or os.curdir
        try:
            names = os.listdir(search_dir)
        except OSError:
            return []

        matches = []
        for name in names:
            if not name.startswith(partial):
                continue
            display = os.path.join(dirname, name) if dirname else name
            matches.append(display + ("/" if os.path.isdir(os.path.join(search_dir, name)) else " "))
        return sorted(matches)

    def complete(self, text, state):
        if state == 0:
            self.matches = self.candidates(text, readline.get_begidx() == 0)
        try:
            return self.matches[state]
        except IndexError:
            return None


def init_readline():
    """Configure readline for line editing, tab completion and up-arrow recall"""
    if not sys.stdin.isatty():
        return

    readline.set_completer(ShellCompleter().complete)
    readline.set_completer_delims(" \t\n")
    if "libedit" in (readline.__doc__ or ""):
        readline.parse_and_bind("bind ^I rl_complete")
    else:
        readline.parse_and_bind("tab: complete")
        readline.parse_and_bind("set editing-mode emacs")
        readline.parse_and_bind("set show-all-if-ambiguous on")


def remember(line):
    """Keep only the last accepted line, so up arrow recalls exactly one line back."""
    readline.clear_history()
    readline.add_history(line)


def forget_since(length):
    """Drop whatever input() added to the readline history after `length` entries."""
    while readline.get_current_history_length() > length:
        readline.remove_history_item(length)


def read_line(prompt):
    """
    Read one line from the user.
    Raises: EOFError at end of input
    """
    before = readline.get_current_history_length()
    line = input(prompt).strip()
    if line:
        remember(line)
    else:
        forget_since(before)
    return line


def read_answer(question):
    """Answer to a builtin's question; never kept for up-arrow recall."""
    before = readline.get_current_history_length()
    answer = input(question)
    forget_since(before)
    return answer
