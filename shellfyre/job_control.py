import logging

import psutil

logger = logging.getLogger(__name__)


class JobTable:
    """
    Background jobs: pid → (Popen, command string).
    Finished jobs are noticed through psutil without calling wait, so they
    stay zombies until something else reaps them.
    """

    def __init__(self):
        self.jobs = {}

    def add(self, proc, cmdline):
        """Register a background job and announce it."""
        self.jobs[proc.pid] = (proc, cmdline)
        print(f"[{proc.pid}] started in background: {cmdline}")

    def is_running(self, pid):
        try:
            return psutil.Process(pid).status() != psutil.STATUS_ZOMBIE
        except psutil.NoSuchProcess:
            return False

    def report_finished(self):
        """Print a notice for every job that exited since the last prompt."""
        finished = [pid for pid in self.jobs if not self.is_running(pid)]
        for pid in finished:
            _, cmdline = self.jobs.pop(pid)
            print(f"[{pid}] done: {cmdline}")
        return finished

    def __len__(self):
        return len(self.jobs)
