import logging
import os
import sys

from shellfyre import config
from shellfyre.builtin import Builtins
from shellfyre.command import Status
from shellfyre.executor import execute_pipeline
from shellfyre.history import DirectoryHistory
from shellfyre.job_control import JobTable
from shellfyre.line_reader import init_readline, read_answer, read_line
from shellfyre.parser import parse_command
from shellfyre.prompt import get_prompt

logger = logging.getLogger(__name__)


def run_line(line, builtins, jobs=None, bin_dir=config.BIN_DIR):
    """
    Parse and run one command line.
    Returns: Status.EXIT when the shell should stop
    """
    stages = parse_command(line)
    if stages[0].auto_complete:
        logger.debug("auto-complete requested for %r", line)

    status = builtins.dispatch(stages)
    if status is not Status.UNKNOWN:
        return status
    return execute_pipeline(stages, jobs=jobs, bin_dir=bin_dir)


def main_loop(start_dir=None, read_input=read_answer):
    """
    Main shell loop.
    `read_input` answers the questions builtins ask (cdh, fileproperties).
    """
    start_dir = start_dir or os.getcwd()
    history = DirectoryHistory(config.history_path(start_dir))
    builtins = Builtins(history, read_input=read_input)
    jobs = JobTable()

    init_readline()

    while True:
        jobs.report_finished()
        try:
            line = read_line(get_prompt())
        except EOFError:
            break
        except KeyboardInterrupt:
            print()
            continue

        try:
            status = run_line(line, builtins, jobs)
        except KeyboardInterrupt:
            print()
            continue
        if status is Status.EXIT:
            break

    print()
    return 0


def main():
    logging.basicConfig(
        level=config.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    sys.exit(main_loop())


if __name__ == "__main__":
    main()
