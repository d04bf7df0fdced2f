""" Click definitions for various shared options and arguments.
"""
import click


def debug_option():
    return click.option("-d", "--debug", is_flag=True, help="Enables debug mode.")


def dry_run_option():
    return click.option(
        "--dry-run", "-n", is_flag=True, default=False, help="Check the application and print the restart batches without restarting anything"
    )


def app_name_arg():
    # optional here so that a missing name is reported with the same exit code as every other usage error
    return click.argument("app_name", metavar="APP_NAME", required=False)


def restart_args_arg():
    return click.argument("restart_args", metavar="[rollingInstanceCount=n] [restartTimeoutMinutes=n]", nargs=-1)
