# -*- encoding: utf-8 -*-
# @File   : escape.py
# @Time   : 2024/11/03 14:08:55
# @Author : Kariko Lin

"""Backslash escapes shared by `IniParser` and `IniFormatter`.

Recognized sequences:

    - `\\\\` for a backslash,
    - `\\` + key-value delimiter, comment marker or section bracket,
    - `\\n` for a newline (multi-line values only).

Anything else after a backslash is kept verbatim, backslash included.
"""

from typing import Iterable, Sequence

ESCAPE = '\\'


def _longest_first(specials: Iterable[str]) -> list[str]:
    # `//` must win over `/` if both are markers.
    return sorted({i for i in specials if i}, key=len, reverse=True)


def escape(text: str, specials: Iterable[str], *, newline: bool = True) -> str:
    marks = _longest_first(specials)
    ret: list[str] = []
    i = 0
    while i < len(text):
        if text[i] == ESCAPE:
            ret.append(ESCAPE * 2)
            i += 1
            continue
        if newline and text[i] == '\n':
            ret.append(ESCAPE + 'n')
            i += 1
            continue
        for m in marks:
            if text.startswith(m, i):
                ret.append(ESCAPE + m)
                i += len(m)
                break
        else:
            ret.append(text[i])
            i += 1
    return ''.join(ret)


def unescape(text: str, specials: Iterable[str], *, newline: bool = False) -> str:
    marks = _longest_first(specials)
    ret: list[str] = []
    i = 0
    while i < len(text):
        ch = text[i]
        if ch != ESCAPE or i + 1 >= len(text):
            ret.append(ch)
            i += 1
            continue
        if text[i + 1] == ESCAPE:
            ret.append(ESCAPE)
            i += 2
            continue
        for m in marks:
            if text.startswith(m, i + 1):
                ret.append(m)
                i += 1 + len(m)
                break
        else:
            if newline and text[i + 1] == 'n':
                ret.append('\n')
                i += 2
            else:
                ret.append(ch)
                i += 1
    return ''.join(ret)


def find_unescaped(text: str, targets: Sequence[str]) -> tuple[int, str]:
    """Index and text of the first target not preceded by an escape.

    Returns `(-1, '')` if there is none.
    """
    marks = _longest_first(targets)
    i = 0
    while i < len(text):
        if text[i] == ESCAPE:
            i += 2
            continue
        for m in marks:
            if text.startswith(m, i):
                return i, m
        i += 1
    return -1, ''


def has_continuation(text: str) -> bool:
    """Whether `text` ends with a backslash that escapes nothing."""
    count = len(text) - len(text.rstrip(ESCAPE))
    return count % 2 == 1
