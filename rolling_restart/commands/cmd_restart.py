import click

from rolling_restart import options
from rolling_restart import platform
from rolling_restart.exceptions import UsageError
from rolling_restart.orchestrator import RestartOrchestrator
from rolling_restart.settings import parse_restart_args


@click.command("restart")
@options.dry_run_option()
@options.app_name_arg()
@options.restart_args_arg()
def cli(app_name, restart_args, dry_run):
    """Perform a rolling restart of APP_NAME.

    Instances are restarted rollingInstanceCount at a time. Each batch must come back up within restartTimeoutMinutes
    before the next one is restarted.
    """
    if not app_name:
        raise UsageError("APP_NAME is required.")
    config = parse_restart_args(restart_args)
    with platform.platform_session() as session:
        RestartOrchestrator(session, config).run(app_name, dry_run=dry_run)
