import os

SHELL_NAME = "shellfyre"

# Only this directory is searched for external programs
BIN_DIR = os.getenv("SHELLFYRE_BIN_DIR", "/usr/bin")

# Program used by `filesearch -o`
OPENER = "xdg-open"

HISTORY_FILENAME = "history.txt"
MAX_DIR_HISTORY = 10

LOG_LEVEL = os.getenv("SHELLFYRE_LOG_LEVEL", "WARNING").upper()


def history_path(start_dir):
    """Directory history lives beside the directory the shell started in."""
    return os.path.join(start_dir, HISTORY_FILENAME)
