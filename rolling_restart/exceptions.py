""" Error kinds that end a rolling restart run.

Every error is terminal: click's standalone mode reports it and exits with
``exit_code``.
"""
import click

from rolling_restart import io


class RollingRestartError(click.ClickException):
    exit_code = 1

    def show(self, file=None):
        io.error(self.format_message())


class UsageError(RollingRestartError):
    """Missing application name or malformed ``key=value`` argument."""


class PreconditionError(RollingRestartError):
    """Application is not stable, or the batch size exceeds its instance count."""


class PlatformQueryError(RollingRestartError):
    """The platform could not be queried or did not accept a command."""


class TimeoutExhausted(RollingRestartError):
    """A polling phase used its whole attempt budget without success."""
