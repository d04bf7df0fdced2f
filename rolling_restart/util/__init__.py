"""
"""
import os
import sys
import time


def which(file):
    # http://stackoverflow.com/questions/5226958/which-equivalent-function-in-python
    if os.path.isabs(file):
        return file if os.path.exists(file) else None
    if os.path.exists(os.path.dirname(sys.executable) + "/" + file):
        return os.path.dirname(sys.executable) + "/" + file
    for path in os.environ.get("PATH", "").split(":"):
        if os.path.exists(path + "/" + file):
            return path + "/" + file
    return None


def poll_until(predicate, attempts, interval, sleep=time.sleep):
    """Evaluate ``predicate`` once per ``interval`` seconds, at most ``attempts`` times.

    The first evaluation happens after one interval has elapsed. Returns ``True`` as soon as the predicate holds and
    ``False`` once the attempts are used up.
    """
    for _ in range(attempts):
        sleep(interval)
        if predicate():
            return True
    return False
