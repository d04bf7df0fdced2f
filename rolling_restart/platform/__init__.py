""" Platform session superclass and utilities
"""
import contextlib
from abc import ABCMeta, abstractmethod

from pydantic import BaseModel, Field


@contextlib.contextmanager
def platform_session(*args, **kwargs):
    # imported here, the cf session module depends on this one
    from rolling_restart.platform.cf import CfCliSession
    session = CfCliSession(*args, **kwargs)
    try:
        yield session
    finally:
        session.close()


class ApplicationSummary(BaseModel):
    """An application as described by the platform at one point in time."""
    name: str
    state: str
    instance_count: int = Field(0, ge=0)
    running_instances: int = Field(0, ge=0)


class PlatformSession(metaclass=ABCMeta):
    """Issues commands against the platform on behalf of one user session.

    Every failure is reported by raising :class:`~rolling_restart.exceptions.PlatformQueryError`.
    """

    @abstractmethod
    def get_application(self, name) -> ApplicationSummary:
        """Return the current summary of application ``name``."""

    @abstractmethod
    def run_command(self, *args):
        """Run a platform CLI command and return its output as a list of lines."""

    def restart_instance(self, name, index):
        self.run_command("restart-app-instance", name, str(index))

    def instance_listing(self, name):
        """Return the tabular instance listing of application ``name``, one row per ``#<index>`` line."""
        return self.run_command("app", name)

    def close(self):
        """ """
