""" Command line utilities for rolling restarts of Cloud Foundry applications
"""

import logging
import os
import sys

import click

from rolling_restart import io
from rolling_restart import options


CONTEXT_SETTINGS = {
    "help_option_names": ["-h", "--help"]
}

COMMAND_ALIASES = {
    "rolling-restart": "restart",
    "show": "status",
}


cmd_folder = os.path.abspath(os.path.join(os.path.dirname(__file__), "commands"))


def set_debug(debug_opt):
    if debug_opt:
        io.DEBUG = True
        logging.basicConfig(level=logging.DEBUG, stream=sys.stdout)


def list_cmds():
    rv = []
    for filename in os.listdir(cmd_folder):
        if filename.endswith(".py") and filename.startswith("cmd_"):
            rv.append(filename[len("cmd_"): -len(".py")])
    rv.sort()
    return rv


def name_to_command(name):
    try:
        mod_name = "rolling_restart.commands.cmd_" + name
        mod = __import__(mod_name, None, None, ["cli"])
    except ImportError as e:
        io.error(f"Problem loading command {name}, exception {e}")
        return
    return mod.cli


class RollingRestartCLI(click.Group):
    def list_commands(self, ctx):
        return list_cmds()

    def get_command(self, ctx, name):
        if name in COMMAND_ALIASES:
            name = COMMAND_ALIASES[name]
        return name_to_command(name)


# Shortcut for `cfroll restart`
@click.command(context_settings=CONTEXT_SETTINGS)
@click.version_option(package_name="cf-rolling-restart")
@options.debug_option()
@options.dry_run_option()
@options.app_name_arg()
@options.restart_args_arg()
@click.pass_context
def rolling_restart(ctx, debug, dry_run, app_name, restart_args):
    """Restart application APP_NAME by rolling 1+ instances at a time so that it stays available during the restart.

    rollingInstanceCount is the number of instances to restart at a time (default 1).
    restartTimeoutMinutes is the time in minutes to wait for the instances of a batch to finish restarting (default 3).
    """
    set_debug(debug)
    mod = __import__("rolling_restart.commands.cmd_restart", None, None, ["cli"])
    return ctx.invoke(mod.cli, app_name=app_name, restart_args=restart_args, dry_run=dry_run)


@click.command(cls=RollingRestartCLI, context_settings=CONTEXT_SETTINGS)
@click.version_option(package_name="cf-rolling-restart")
@options.debug_option()
@click.pass_context
def cfroll(ctx, debug):
    """Inspect and restart Cloud Foundry application instances."""
    set_debug(debug)
