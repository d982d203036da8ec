# Author: tlsoracle developers, (c) 2026
# Released under Gnu GPL v2.0, see LICENSE file for details

"""Reporting progress of a scan and its estimated completion time."""

import math
import time


def _format_seconds(sec):
    """Format number of seconds into a more readable string."""
    elems = []
    msec, sec = math.modf(sec)
    sec = int(sec)
    hours, rem = divmod(sec, 60*60)
    if hours:
        elems.append("{0:2}h".format(hours))
    minutes, sec = divmod(rem, 60)
    if minutes or elems:
        elems.append("{0:2}m".format(minutes))
    elems.append("{0:5.2f}s".format(sec+msec))
    return " ".join(elems)


def format_status(done, total, elapsed, unit=''):
    """
    Return the status line for ``done`` out of ``total`` work units.

    :param int done: finished work units
    :param int total: all work units
    :param float elapsed: time spent so far, in seconds
    :param str unit: name of the work unit, with leading space
    """
    percent = done * 100.0 / total
    if done:
        remaining = (total - done) * elapsed / done
    else:
        # assume every unit takes as long as what already passed
        remaining = total * elapsed
    return ("Done: {0}/{1}{2} ({3:6.2f}%), elapsed: {4}, remaining: {5}"
            .format(done, total, unit, percent, _format_seconds(elapsed),
                    _format_seconds(remaining)))


def progress_report(status, unit='', delay=None, end=None):
    """
    Periodically print progress of a task in ``status``, a thread runner.

    :param list status: three element list, the first two specify the
        number of finished and all work units, the third is a
        :py:class:`threading.Event`, the thread finishes once it is set
    :param str unit: name of the work unit (like `` conf``)
    :param float delay: how often to print the status line, in seconds
    :param str end: line terminator, ``\\r`` (default) overwrites the line,
        ``\\n`` prints a new line every time
    """
    if len(status) != 3:
        raise ValueError("status is not a 3 element array")
    if delay is None:
        delay = 2
    if end is None:
        end = '\r'

    start_exec = time.time()
    while True:
        status[2].wait(delay)
        print(format_status(status[0], status[1], time.time() - start_exec,
                            unit),
              end=end)
        if status[2].is_set():
            break
