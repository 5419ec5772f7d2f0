# -*- encoding: utf-8 -*-
# @File   : consts.py
# @Time   : 2024/11/02 21:40:17
# @Author : Kariko Lin

from enum import Enum
from typing import Callable

# normalizes a key before lookup. shared by every keyed container.
Comparer = Callable[[str], str]


def case_sensitive(key: str) -> str:
    return key


def case_insensitive(key: str) -> str:
    return key.casefold()


class DuplicateKeyPolicy(str, Enum):
    OVERWRITE = 'overwrite'
    FIRST_WINS = 'first_wins'
    REJECT = 'reject'
    CONCATENATE = 'concatenate'


class DuplicateSectionPolicy(str, Enum):
    MERGE = 'merge'
    REJECT = 'reject'
    SEPARATE = 'separate'


class TrailingCommentPolicy(str, Enum):
    DISCARD = 'discard'
    PRESERVE = 'preserve'


class ParseErrorKind(str, Enum):
    INVALID_ARGUMENT = 'InvalidArgument'
    DUPLICATE_KEY = 'DuplicateKey'
    DUPLICATE_SECTION = 'DuplicateSection'
    MALFORMED_LINE = 'MalformedLine'
    MISSING_CLOSING_BRACKET = 'MissingClosingBracket'


# `[name]` -> `[name~2]` when sections are kept apart.
SEPARATE_KEY_MARK = '~'
