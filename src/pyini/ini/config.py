# -*- encoding: utf-8 -*-
# @File   : config.py
# @Time   : 2024/11/02 21:58:06
# @Author : Kariko Lin

import dataclasses
from dataclasses import dataclass, fields
from io import TextIOBase
from os import PathLike
from typing import Any, Mapping, Self

import yaml

from .consts import (
    Comparer,
    DuplicateKeyPolicy,
    DuplicateSectionPolicy,
    TrailingCommentPolicy,
    case_insensitive,
    case_sensitive
)
from .errors import InvalidArgument
from .escape import ESCAPE

__all__ = ['IniParserConfiguration']


@dataclass(frozen=True, kw_only=True)
class IniParserConfiguration:
    """How `IniParser` reads and `IniFormatter` writes.

    Sequences given as lists are stored as tuples, and policies given
    as strings (`'reject'`, ...) as their enums, so the instance stays
    hashable and immutable.
    """
    comment_markers: tuple[str, ...] = (';', '#')
    key_value_delimiter: str = '='
    section_delimiters: tuple[str, str] = ('[', ']')
    case_insensitive: bool = False
    duplicate_keys: DuplicateKeyPolicy = DuplicateKeyPolicy.OVERWRITE
    duplicate_sections: DuplicateSectionPolicy = DuplicateSectionPolicy.MERGE
    skip_invalid_lines: bool = True
    allow_global_properties: bool = True
    multiline_values: bool = False
    trim_whitespace: bool = True
    inline_comments: bool = False
    trailing_comments: TrailingCommentPolicy = TrailingCommentPolicy.DISCARD
    concatenate_separator: str = ','
    # only applied when `trim_whitespace` is on, or it would not read back.
    assignment_spacer: str = ''
    new_line: str = '\n'
    section_spacing: int = 1

    def __post_init__(self) -> None:
        def fix(name: str, value: object) -> None:
            object.__setattr__(self, name, value)

        if isinstance(self.comment_markers, str):
            fix('comment_markers', (self.comment_markers,))
        fix('comment_markers', tuple(self.comment_markers))
        fix('section_delimiters', tuple(self.section_delimiters))
        try:
            fix('duplicate_keys', DuplicateKeyPolicy(self.duplicate_keys))
            fix('duplicate_sections',
                DuplicateSectionPolicy(self.duplicate_sections))
            fix('trailing_comments',
                TrailingCommentPolicy(self.trailing_comments))
        except ValueError as e:
            raise InvalidArgument(str(e)) from e
        self.__validate()

    def __validate(self) -> None:
        def token(what: str, value: object) -> str:
            if not isinstance(value, str) or not value \
                    or value != value.strip() or '\n' in value:
                raise InvalidArgument(
                    f'{what} should be a non-blank string, got {value!r}')
            if ESCAPE in value:
                raise InvalidArgument(f'{what} can not contain "{ESCAPE}"')
            return value

        if not self.comment_markers:
            raise InvalidArgument('at least one comment marker is needed')
        markers = [token('comment marker', i) for i in self.comment_markers]
        delim = token('key-value delimiter', self.key_value_delimiter)
        if len(self.section_delimiters) != 2:
            raise InvalidArgument(
                'section delimiters should be an (open, close) pair')
        brackets = [token('section delimiter', i)
                    for i in self.section_delimiters]

        # a line starting with any of them must not be ambiguous.
        starters = [*markers, delim, brackets[0]]
        for i, a in enumerate(starters):
            for b in starters[i + 1:]:
                if a.startswith(b) or b.startswith(a):
                    raise InvalidArgument(f'"{a}" and "{b}" are ambiguous')
        if brackets[1] in markers or brackets[1] == delim:
            raise InvalidArgument(
                f'closing delimiter "{brackets[1]}" clashes with other tokens')

        if self.new_line not in ('\n', '\r\n', '\r'):
            raise InvalidArgument(f'unsupported new line {self.new_line!r}')
        if not isinstance(self.assignment_spacer, str) \
                or self.assignment_spacer.strip(' \t'):
            raise InvalidArgument('assignment spacer should be blanks only')
        if not isinstance(self.section_spacing, int) \
                or self.section_spacing < 0:
            raise InvalidArgument('section spacing should be a natural number')
        if not isinstance(self.concatenate_separator, str):
            raise InvalidArgument('concatenate separator should be a string')

    @property
    def comparer(self) -> Comparer:
        return case_insensitive if self.case_insensitive else case_sensitive

    @property
    def comment_marker(self) -> str:
        """The marker used when writing comments."""
        return self.comment_markers[0]

    @property
    def specials(self) -> tuple[str, ...]:
        """Everything that gets a backslash in front when written."""
        return (self.key_value_delimiter,
                *self.comment_markers,
                *self.section_delimiters)

    def replace(self, **changes: Any) -> Self:
        return dataclasses.replace(self, **changes)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> Self:
        """Build from plain data, like a parsed YAML or JSON object."""
        known = {i.name for i in fields(cls)}
        if unknown := [k for k in data if k not in known]:
            raise InvalidArgument(f'unknown options: {", ".join(unknown)}')
        try:
            return cls(**data)
        except TypeError as e:
            raise InvalidArgument(str(e)) from e

    @classmethod
    def from_yaml(cls, source: str | PathLike | TextIOBase) -> Self:
        """Load options from a YAML mapping, e.g.

            ```yaml
            comment_markers: [';']
            duplicate_keys: reject
            multiline_values: true
            ```
        """
        if isinstance(source, (str, PathLike)):
            with open(source, 'r', encoding='utf-8') as fp:
                data = yaml.safe_load(fp)
        else:
            data = yaml.safe_load(source)
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise InvalidArgument(
                f'YAML options should be a mapping, got {type(data).__name__}')
        return cls.from_mapping(data)
