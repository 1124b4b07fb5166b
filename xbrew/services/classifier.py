"""
Input classification for xbrew.

Turns the positional tokens of a command line into an InvocationRequest:

    <action> <formula> <commit-or-url> [tap]   (long form)
    <action> <url> [tap]                       (short form)
"""

import re
from typing import Sequence

from ..domain import Action, InvocationRequest, is_valid_formula_name
from ..exit_codes import MissingArgumentError, UnresolvableSourceError, UsageError

URL_PATTERN = re.compile(r'^https?://')

MAX_ARGUMENTS = 3


def is_url(value: str) -> bool:
    """True if value looks like an http(s) URL."""
    return bool(value) and bool(URL_PATTERN.match(value))


def classify(action: str, args: Sequence[str], default_tap: str) -> InvocationRequest:
    """
    Classify raw command-line tokens.

    Args:
        action: Action token; must be exactly 'install' or 'reinstall'
        args: Tokens after the action
        default_tap: Tap to use when none is given

    Returns:
        InvocationRequest. In short form `formula` is empty.

    Raises:
        InvalidActionError: bad action token (checked first)
        MissingArgumentError: long form without formula or commit/URL
        UsageError: too many tokens
        UnresolvableSourceError: formula name is not a single path component
    """
    parsed_action = Action.parse(action)

    tokens = list(args)
    if len(tokens) > MAX_ARGUMENTS:
        raise UsageError(f"too many arguments: {' '.join(tokens[MAX_ARGUMENTS:])}")
    tokens += [''] * (MAX_ARGUMENTS - len(tokens))
    first, second, third = tokens

    if is_url(first):
        tap = second or default_tap
        return InvocationRequest(
            action=parsed_action,
            formula='',
            source=first,
            tap=tap,
            defaulted_tap=not second,
            short_form=True,
        )

    if not first or not second:
        raise MissingArgumentError()
    if not is_valid_formula_name(first):
        raise UnresolvableSourceError(f"invalid formula name: {first}")

    return InvocationRequest(
        action=parsed_action,
        formula=first,
        source=second,
        tap=third or default_tap,
        defaulted_tap=not third,
    )
