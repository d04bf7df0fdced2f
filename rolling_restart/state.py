""" Classes and functions to represent and interpret the state of an
application's instances as reported by the platform.
"""
from __future__ import annotations
import re
from typing import Iterable, List, Sequence, Tuple

from pydantic import BaseModel, ConfigDict, Field

import rolling_restart.io

STARTED = "started"
STOPPED = "stopped"
RUNNING_MARKER = "running"

# each row of the instance listing begins with "#<index>"
INSTANCE_ROW_RE = re.compile(r"#([0-9]+)")


class ApplicationStatus(BaseModel):
    """Normalized snapshot of an application, rebuilt on every probe."""
    model_config = ConfigDict(frozen=True)

    name: str
    state: str
    desired_instances: int = Field(ge=0)
    running_instances: int = Field(ge=0)

    @property
    def started(self):
        return self.state == STARTED

    @property
    def stable(self):
        return self.started and self.running_instances == self.desired_instances

    @classmethod
    def from_summary(cls, summary):
        desired = summary.instance_count
        # a stopped application has no meaningful target count
        if summary.state == STOPPED:
            desired = 0
        return cls(
            name=summary.name,
            state=summary.state,
            desired_instances=desired,
            running_instances=summary.running_instances,
        )

    def describe(self):
        return (f'Application "{self.name}" current state is "{self.state}" with requested instances '
                f'"{self.desired_instances}" and running instances "{self.running_instances}"')


class StatusProbe:
    def __init__(self, session):
        self.session = session

    def fetch(self, app_name) -> ApplicationStatus:
        # PlatformQueryError from the session is fatal and is not retried here
        summary = self.session.get_application(app_name)
        status = ApplicationStatus.from_summary(summary)
        rolling_restart.io.debug(status.describe())
        return status


def parse_instance_lines(lines: Iterable[str], instances: Iterable[int]) -> Tuple[str, int]:
    """Pick the rows of the platform's instance listing that belong to ``instances``.

    Returns the matching rows, in their original order and each terminated by a newline, and the number of them that
    report the instance as running.
    """
    wanted = {str(i) for i in instances}
    matched = []
    running_count = 0
    for line in lines:
        match = INSTANCE_ROW_RE.match(line)
        # the whole digit run is compared so that #10 is never taken for #1
        if not match or match.group(1) not in wanted:
            continue
        matched.append(line + "\n")
        if RUNNING_MARKER in line:
            running_count += 1
    return "".join(matched), running_count


def partition_instances(desired: int, batch_size: int) -> List[Sequence[int]]:
    """Split ``range(desired)`` into contiguous batches of ``batch_size`` indices, the last one possibly shorter."""
    if batch_size < 1:
        raise ValueError(f"batch size must be at least 1, got {batch_size}")
    instances = range(desired)
    return [tuple(instances[i:i + batch_size]) for i in range(0, desired, batch_size)]
