import getpass
import os
import socket

from shellfyre.config import SHELL_NAME

# shown when the working directory was removed under us
UNKNOWN_DIR = "(deleted)"


def current_directory():
    try:
        return os.getcwd()
    except OSError:
        return UNKNOWN_DIR


def get_prompt():
    """Generate shell prompt"""
    user = os.getenv("USER") or getpass.getuser()
    return f"{user}@{socket.gethostname()}:{current_directory()} {SHELL_NAME}$ "
