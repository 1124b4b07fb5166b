#!/usr/bin/env python3

import sys

import click

from . import __version__
from .cli_utils import show_help, standard_command
from .config import configure_logging, load_config
from .domain import Action
from .exit_codes import USAGE_ERROR
from .render import echo, render_done, render_plan
from .services.pin_service import PinOptions, PinService, check_dependencies

CONTEXT_SETTINGS = dict(help_option_names=['-h', '--help'])

EPILOG = """\b
How to find the raw URL or commit SHA on GitHub:
  1. Open the formula in homebrew-core, e.g.
     https://github.com/Homebrew/homebrew-core/blob/master/Formula/d/doxygen.rb
     (older revisions use Formula/doxygen.rb without the letter directory)
  2. Click "History" and find the commit with the version you want.
  3. Click "View code at this point", then "Raw". The address bar now shows
     https://raw.githubusercontent.com/Homebrew/homebrew-core/<SHA>/Formula/doxygen.rb
  4. Pass that URL, or just the SHA, to xbrew.

\b
Examples:
  xbrew reinstall doxygen d2267b9f2ad247bc9c8273eb755b39566a474a70
  brew pin "$(whoami)/local/doxygen"

  xbrew install https://raw.githubusercontent.com/Homebrew/homebrew-core/d2267b9f2ad247bc9c8273eb755b39566a474a70/Formula/doxygen.rb myuser/old

\b
Notes:
  - The formula is committed into the tap so Homebrew recognizes it.
    xbrew never pins it.
  - Review $(brew --repo TAP)/Formula/FORMULA.rb before installing if you
    want to verify provenance. Contents are not validated beyond a
    non-empty download check, so only use trusted commits or URLs.
  - Push the tap repository to a remote and `brew tap` it elsewhere to
    reproduce the install on other machines.
"""


@click.command(context_settings=CONTEXT_SETTINGS, epilog=EPILOG)
@click.version_option(__version__, prog_name='xbrew')
@click.argument('action', required=False, default='')
@click.argument('args', nargs=-1)
@standard_command
def cli(action, args):
    """xbrew - Install or reinstall a Homebrew formula from a specific commit.

    \b
    Usage:
      xbrew <install|reinstall> <formula> <commit-sha|raw-url> [tap]
      xbrew <install|reinstall> <raw-url> [tap]

    Creates the tap if needed (default: "<user>/local"), fetches the exact
    Formula/<formula>.rb from the given homebrew-core commit SHA or raw URL,
    commits it into the tap and runs `brew install` or `brew reinstall`
    against the tap-qualified formula.
    """
    if not action:
        show_help()
        sys.exit(USAGE_ERROR)

    Action.parse(action)
    check_dependencies()

    config = load_config()
    configure_logging(config)

    service = PinService(
        PinOptions.from_config(config),
        echo=echo,
        on_plan=render_plan,
    )
    result = service.run(action, args)
    render_done(result)


def main():
    cli()


if __name__ == "__main__":
    main()
