"""Formatting-directive extraction from raw post markup.

Authors tune how a post is formatted by embedding a single HTML comment in the
body::

    <!-- formatting-options toc:false raw bodyClassName:wide -->

Each whitespace-separated token is ``key`` or ``key:value``. A bare key or the
value ``true`` means ``True``, ``false`` means ``False``, anything else is kept
as a string. Extraction is pure and idempotent; malformed input yields the
default (empty) options instead of raising.
"""

from __future__ import annotations

import logging
import re

from sitebake.config import FORMATTING_DIRECTIVE_PATTERN

from ..content.models import FormattingOptions

logger = logging.getLogger(__name__)

_DIRECTIVE_RE = re.compile(FORMATTING_DIRECTIVE_PATTERN, re.DOTALL)


def parse_formatting_options(text: str) -> FormattingOptions:
    """Parse directive text such as ``"toc:false raw"`` into options.

    Parameters
    ----------
    text : str
        The body of a formatting-options comment.

    Returns
    -------
    FormattingOptions
        Mapping of option names to ``bool`` or ``str`` values. Tokens with an
        empty name are ignored.

    Examples
    --------
    >>> parse_formatting_options("toc:false raw somekey:somevalue")
    {'toc': False, 'raw': True, 'somekey': 'somevalue'}
    """
    options: FormattingOptions = {}
    for token in text.split():
        name, sep, value = token.partition(":")
        if not name:
            continue
        if not sep or value == "true":
            options[name] = True
        elif value == "false":
            options[name] = False
        else:
            options[name] = value
    return options


def extract_formatting_options(markup: str) -> FormattingOptions:
    """Return the formatting options embedded in ``markup``, if any.

    Only the first directive comment is honoured. Markup without a directive,
    or input that is not a string, yields an empty mapping.

    Examples
    --------
    >>> extract_formatting_options("<p>Hi</p><!-- formatting-options toc:false -->")
    {'toc': False}
    >>> extract_formatting_options("<p>No options</p>")
    {}
    """
    if not isinstance(markup, str):
        logger.warning(
            "Ignoring formatting directives in non-string markup (%s)",
            type(markup).__name__,
        )
        return {}
    match = _DIRECTIVE_RE.search(markup)
    if match is None:
        return {}
    return parse_formatting_options(match.group(1))
