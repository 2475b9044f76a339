"""Detaching the process from the controlling terminal."""

import os
import sys


def daemonize() -> None:
    """
    Run the rest of the program as a background daemon.

    Uses the classic double fork so the daemon can never reacquire a
    terminal, then moves to ``/`` and points the standard streams at
    ``/dev/null``. The parent processes exit with status 0.
    """
    if os.fork() > 0:
        os._exit(0)

    os.setsid()

    if os.fork() > 0:
        os._exit(0)

    os.umask(0)
    os.chdir("/")

    sys.stdout.flush()
    sys.stderr.flush()
    devnull = os.open(os.devnull, os.O_RDWR)
    for fd in (sys.stdin.fileno(), sys.stdout.fileno(), sys.stderr.fileno()):
        os.dup2(devnull, fd)
    os.close(devnull)
