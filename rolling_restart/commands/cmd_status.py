import click

from rolling_restart import io
from rolling_restart import options
from rolling_restart import platform
from rolling_restart.exceptions import UsageError
from rolling_restart.state import parse_instance_lines, StatusProbe


@click.command("status")
@options.app_name_arg()
def cli(app_name):
    """Display the instance status of APP_NAME.

    Reports whether the application is stable enough for a rolling restart to begin.
    """
    if not app_name:
        raise UsageError("APP_NAME is required.")
    with platform.platform_session() as session:
        status = StatusProbe(session).fetch(app_name)
        io.info(status.describe())
        listing = session.instance_listing(app_name)
        text, running_count = parse_instance_lines(listing, range(status.desired_instances))
        io.echo(text)
        if status.stable:
            io.info(f"{running_count} of {status.desired_instances} instance(s) listed as running, ready for a rolling restart")
        else:
            io.warn("Application is not stable right now, a rolling restart would be refused")
