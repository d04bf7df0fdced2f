""" Operator output. Everything, warnings and errors included, is written to standard output.
"""
import sys
import traceback

import click


DEBUG = False
# passed as click.echo(err=...) by every writer below
TO_STDERR = False


def _write(text, nl=True):
    click.echo(text, nl=nl, err=TO_STDERR)


def debug(message, *args):
    if args:
        message = message % args
    if DEBUG:
        _write(message)


def info(message, *args, bright=True):
    if args:
        message = message % args
    style_kwargs = {}
    if bright:
        style_kwargs = {"bold": True, "fg": "green"}
    _write(click.style(message, **style_kwargs))


def echo(text):
    # raw progress text from the platform, printed as-is
    _write(text, nl=False)


def error(message, *args):
    if args:
        message = message % args
    if DEBUG and sys.exc_info()[0] is not None:
        _write(traceback.format_exc(), nl=False)
    _write(click.style(message, bold=True, fg="red"))


def warn(message, *args):
    if args:
        message = message % args
    _write(click.style(message, fg="red"))
