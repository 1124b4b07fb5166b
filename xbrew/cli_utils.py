"""
Common CLI utilities and decorators for consistent command behavior.
"""

import logging
import sys
import click
from functools import wraps

from .exit_codes import (
    SUCCESS, INTERRUPTED,
    get_exit_code_for_exception, CommandError
)
from .render import render_error

logger = logging.getLogger(__name__)


def show_help() -> None:
    """Print the current command's help text, if there is a command."""
    ctx = click.get_current_context(silent=True)
    if ctx is not None:
        click.echo(ctx.get_help())


def standard_command(func):
    """
    Decorator that provides standard CLI behavior:
    - One-line diagnostics on stderr
    - Help text after usage errors
    - Exit codes from xbrew.exit_codes
    - Exit 130 on Ctrl+C
    """
    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            func(*args, **kwargs)
        except KeyboardInterrupt:
            render_error("Interrupted by user")
            sys.exit(INTERRUPTED)
        except click.ClickException:
            # Click exceptions already have their exit code
            raise
        except CommandError as e:
            render_error(str(e))
            if getattr(e, 'show_help', False):
                click.echo()
                show_help()
            sys.exit(e.exit_code)
        except Exception as e:
            logger.debug("Unhandled error", exc_info=True)
            render_error(f"Command failed: {e}")
            sys.exit(get_exit_code_for_exception(e))

        sys.exit(SUCCESS)

    return wrapper
