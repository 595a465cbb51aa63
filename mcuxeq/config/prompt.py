"""Prompt pattern compilation.

Prompt patterns are written as POSIX extended regular expressions, the
dialect device shells and their users are used to. Python's re module
differs from it in a few places, so patterns are rewritten before
compiling:

- bracket character classes such as [:alnum:] become plain ranges
- a backslash inside a bracket expression is a literal member
- an unescaped '$' outside brackets anchors at the very end of the line
  ('$' in re also matches before a trailing newline)

The result is compiled with re.DOTALL so '.' matches a newline as well.
"""

import os
import re
from typing import Dict, Pattern

from mcuxeq.core.exceptions import PromptPatternError

POSIX_CLASSES: Dict[str, str] = {
    'alnum': '0-9A-Za-z',
    'alpha': 'A-Za-z',
    'blank': ' \\t',
    'cntrl': '\\x00-\\x1f\\x7f',
    'digit': '0-9',
    'graph': '\\x21-\\x7e',
    'lower': 'a-z',
    'print': '\\x20-\\x7e',
    'punct': '!-/:-@\\[-`{-~',
    'space': ' \\t\\n\\r\\f\\v',
    'upper': 'A-Z',
    'word': '0-9A-Za-z_',
    'xdigit': '0-9A-Fa-f',
}

_POSIX_CLASS = re.compile(r"\[:([a-z]+):\]")


def translate_pattern(pattern: str) -> str:
    """Rewrite a POSIX extended regular expression into re syntax.

    Example:
        >>> translate_pattern("^[[:alnum:]]*[#$>] $")
        '^[0-9A-Za-z]*[#$>] \\\\Z'

    Raises:
        PromptPatternError: Unknown class name
    """
    out = []
    i = 0
    n = len(pattern)
    in_bracket = False

    while i < n:
        c = pattern[i]

        if not in_bracket:
            if c == '\\' and i + 1 < n:
                out.append(pattern[i:i + 2])
                i += 2
                continue
            out.append('\\Z' if c == '$' else c)
            i += 1
            if c == '[':
                in_bracket = True
                if i < n and pattern[i] == '^':
                    out.append('^')
                    i += 1
                # Leading ']' is a literal member of the set
                if i < n and pattern[i] == ']':
                    out.append('\\]')
                    i += 1
            continue

        m = _POSIX_CLASS.match(pattern, i)
        if m:
            name = m.group(1)
            if name not in POSIX_CLASSES:
                raise PromptPatternError(
                    f"Unknown character class [:{name}:]", pattern)
            out.append(POSIX_CLASSES[name])
            i = m.end()
            continue

        if c == '[':
            out.append('\\[')
        elif c == '\\':
            out.append('\\\\')
        else:
            if c == ']':
                in_bracket = False
            out.append(c)
        i += 1

    return ''.join(out)


def compile_prompt(pattern: str) -> Pattern[bytes]:
    """Compile a prompt pattern for matching against raw line bytes.

    Args:
        pattern: POSIX-style extended regular expression

    Returns:
        Compiled bytes pattern

    Raises:
        PromptPatternError: Pattern is malformed
    """
    translated = translate_pattern(pattern)
    try:
        return re.compile(os.fsencode(translated), re.DOTALL)
    except re.error as e:
        raise PromptPatternError(
            f"Failed to compile prompt regex: {e}", pattern) from e
