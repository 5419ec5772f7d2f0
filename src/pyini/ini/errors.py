# -*- encoding: utf-8 -*-
# @File   : errors.py
# @Time   : 2024/11/02 21:52:40
# @Author : Kariko Lin

from dataclasses import dataclass

from .consts import ParseErrorKind


class IniError(Exception):
    """Base of everything this package raises on purpose."""
    pass


class InvalidArgument(IniError, ValueError):
    """Empty key or section name, or a broken configuration."""
    pass


class DuplicateKeyError(IniError):
    def __init__(self, key: str) -> None:
        super().__init__(f'duplicate key "{key}"')
        self.key = key


class DuplicateSectionError(IniError):
    def __init__(self, name: str) -> None:
        super().__init__(f'duplicate section [{name}]')
        self.name = name


@dataclass(kw_only=True)
class ParseError:
    kind: ParseErrorKind
    line_number: int  # 1-based
    content: str
    message: str = ''

    def __str__(self) -> str:
        return (f'line {self.line_number}: {self.kind.value}'
                f'{f" ({self.message})" if self.message else ""}'
                f': {self.content!r}')


class IniParseFailure(IniError):
    """Every blocking error of one parse, in line order."""
    def __init__(self, errors: list[ParseError]) -> None:
        self.errors = list(errors)
        super().__init__(
            f'{len(self.errors)} error(s) while parsing INI:\n' +
            '\n'.join(f'  {i}' for i in self.errors))
