# -*- encoding: utf-8 -*-
# @File   : parser.py
# @Time   : 2024/11/03 15:27:42
# @Author : Kariko Lin

"""Text to `IniDocument`.

The parser walks the source line by line and never raises for bad input:
every blocking problem is collected into `ParseResult.errors`, so the
caller sees all of them at once. Use `ParseResult.unwrap()` (or `loads()`)
to get an exception instead.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum, auto
from io import StringIO
from typing import Iterable, Iterator, TextIO

from .config import IniParserConfiguration
from .consts import ParseErrorKind, TrailingCommentPolicy
from .errors import (
    DuplicateKeyError,
    DuplicateSectionError,
    IniParseFailure,
    InvalidArgument,
    ParseError
)
from .escape import find_unescaped, has_continuation, unescape
from .model import IniDocument, Property, PropertyCollection, Section

__all__ = ['IniParser', 'ParseResult', 'ParserState', 'loads', 'load']

logger = logging.getLogger(__name__)


class ParserState(Enum):
    BEFORE_ANY_SECTION = auto()
    IN_SECTION = auto()
    IN_MULTILINE_VALUE = auto()


@dataclass
class ParseResult:
    document: IniDocument | None
    errors: list[ParseError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    def unwrap(self) -> IniDocument:
        if self.errors or self.document is None:
            raise IniParseFailure(self.errors)
        return self.document


@dataclass
class _Context:
    """Everything one `parse()` call carries between lines."""
    document: IniDocument
    state: ParserState = ParserState.BEFORE_ANY_SECTION
    section: Section | None = None
    pending: list[str] = field(default_factory=list)
    errors: list[ParseError] = field(default_factory=list)
    # a value continued over several lines
    open_key: str = ''
    open_line: int = 0
    open_raw: str = ''
    open_comments: list[str] = field(default_factory=list)
    open_pieces: list[str] = field(default_factory=list)

    @property
    def properties(self) -> PropertyCollection:
        if self.section is None:
            return self.document.global_properties
        return self.section.properties

    def flush_comments(self) -> list[str]:
        ret, self.pending = self.pending, []
        return ret


def _physical_lines(source: str | Iterable[str]) -> Iterator[str]:
    if isinstance(source, str):
        source = StringIO(source)
    for i, line in enumerate(source):
        line = line.rstrip('\r\n')
        if i == 0 and line.startswith('\ufeff'):
            line = line[1:]
        yield line


class IniParser:
    def __init__(self, config: IniParserConfiguration | None = None) -> None:
        if config is None:
            config = IniParserConfiguration()
        elif not isinstance(config, IniParserConfiguration):
            raise InvalidArgument(
                f'expect IniParserConfiguration, got {type(config).__name__}')
        self._config = config

    @property
    def config(self) -> IniParserConfiguration:
        return self._config

    def parse(self, source: str | Iterable[str]) -> ParseResult:
        """Read a decoded string, a text stream, or any iterable of lines.
        """
        ctx = _Context(IniDocument(self._config))
        lineno = 0
        for lineno, line in enumerate(_physical_lines(source), 1):
            self.__readline(ctx, lineno, line)
        if ctx.state is ParserState.IN_MULTILINE_VALUE:
            self.__close_value(ctx)
        self.__trailing_comments(ctx)

        if ctx.errors:
            logger.debug('INI parse failed with %d error(s) in %d lines',
                         len(ctx.errors), lineno)
            return ParseResult(None, ctx.errors)
        return ParseResult(ctx.document)

    def __readline(self, ctx: _Context, lineno: int, raw: str) -> None:
        if ctx.state is ParserState.IN_MULTILINE_VALUE:
            self.__continue_value(ctx, raw)
            return
        stripped = raw.strip()
        if not stripped:
            return
        for i in self._config.comment_markers:
            if stripped.startswith(i):
                ctx.pending.append(self.__comment_text(raw.lstrip(), i))
                return
        if stripped.startswith(self._config.section_delimiters[0]):
            self.__read_section(ctx, lineno, raw, stripped)
        else:
            self.__read_property(ctx, lineno, raw)

    def __comment_text(self, text: str, marker: str) -> str:
        """`text` starts with `marker`."""
        text = text[len(marker):]
        if self._config.trim_whitespace:
            return text.strip()
        # the formatter writes `; comment`, so drop exactly that space.
        return text[1:] if text.startswith(' ') else text

    def __split_inline_comment(self, ctx: _Context, text: str) -> str:
        if not self._config.inline_comments:
            return text
        idx, marker = find_unescaped(text, self._config.comment_markers)
        if idx < 0:
            return text
        ctx.pending.append(self.__comment_text(text[idx:], marker))
        return text[:idx]

    def __invalid(
        self, ctx: _Context, lineno: int, raw: str,
        kind: ParseErrorKind = ParseErrorKind.MALFORMED_LINE,
        message: str = ''
    ) -> None:
        if self._config.skip_invalid_lines:
            logger.debug('skipped line %d (%s): %r', lineno, message, raw)
            return
        ctx.errors.append(ParseError(
            kind=kind, line_number=lineno, content=raw, message=message))

    def __read_section(
        self, ctx: _Context, lineno: int, raw: str, stripped: str
    ) -> None:
        opening, closing = self._config.section_delimiters
        body = stripped[len(opening):]

        end, _ = find_unescaped(body, (closing,))
        if end < 0:
            self.__invalid(ctx, lineno, raw,
                           ParseErrorKind.MISSING_CLOSING_BRACKET,
                           f'no closing "{closing}"')
            return
        name = body[:end].strip()
        tail = body[end + len(closing):].strip()
        # a comment may follow the header, with or without inline comments.
        idx, marker = find_unescaped(tail, self._config.comment_markers)
        if (tail and idx != 0) or not name:
            self.__invalid(ctx, lineno, raw, message=(
                'empty section name' if not name
                else 'text after section header'))
            return
        if tail:
            ctx.pending.append(self.__comment_text(tail, marker))

        name = unescape(name, self._config.specials,
                        newline=self._config.multiline_values)
        section = Section(
            name, self._config.comparer,
            duplicates=self._config.duplicate_keys,
            separator=self._config.concatenate_separator)
        section.comments = ctx.flush_comments()
        try:
            ctx.section = ctx.document.sections._place(section)
        except DuplicateSectionError as e:
            ctx.errors.append(ParseError(
                kind=ParseErrorKind.DUPLICATE_SECTION, line_number=lineno,
                content=raw, message=str(e)))
            ctx.section = ctx.document.sections[name]
        ctx.state = ParserState.IN_SECTION

    def __read_property(self, ctx: _Context, lineno: int, raw: str) -> None:
        cfg = self._config
        comments_before = len(ctx.pending)
        text = raw.strip() if cfg.trim_whitespace else raw
        text = self.__split_inline_comment(ctx, text)

        idx, _ = find_unescaped(text, (cfg.key_value_delimiter,))
        key, value = '', ''
        if idx >= 0:
            key = text[:idx]
            value = text[idx + len(cfg.key_value_delimiter):]
        if cfg.trim_whitespace:
            key, value = key.strip(), value.strip()

        message = ''
        if idx < 0:
            message = f'no "{cfg.key_value_delimiter}" found'
        elif not key:
            message = 'empty key'
        elif ctx.section is None and not cfg.allow_global_properties:
            message = 'property outside of any section'
        if message:
            del ctx.pending[comments_before:]
            self.__invalid(ctx, lineno, raw, message=message)
            return

        if cfg.multiline_values and has_continuation(value):
            ctx.state = ParserState.IN_MULTILINE_VALUE
            ctx.open_key = key
            ctx.open_line = lineno
            ctx.open_raw = raw
            ctx.open_comments = ctx.flush_comments()
            ctx.open_pieces = [self.__piece(value[:-1])]
            return
        self.__commit(ctx, lineno, raw, key, value, ctx.flush_comments())

    def __piece(self, text: str) -> str:
        return text.strip() if self._config.trim_whitespace else text

    def __continue_value(self, ctx: _Context, raw: str) -> None:
        # pending is empty here, the key line took the comments already.
        text = self.__piece(self.__split_inline_comment(ctx, raw))
        ctx.open_comments.extend(ctx.flush_comments())
        if has_continuation(text):
            ctx.open_pieces.append(self.__piece(text[:-1]))
            return
        ctx.open_pieces.append(text)
        self.__close_value(ctx)

    def __close_value(self, ctx: _Context) -> None:
        ctx.state = (ParserState.BEFORE_ANY_SECTION if ctx.section is None
                     else ParserState.IN_SECTION)
        self.__commit(ctx, ctx.open_line, ctx.open_raw, ctx.open_key,
                      '\n'.join(ctx.open_pieces), ctx.open_comments)
        ctx.open_pieces, ctx.open_comments = [], []

    def __commit(
        self, ctx: _Context, lineno: int, raw: str,
        key: str, value: str, comments: list[str]
    ) -> None:
        specials = self._config.specials
        multiline = self._config.multiline_values
        prop = Property(
            unescape(key, specials, newline=multiline),
            unescape(value, specials, newline=multiline),
            comments)
        try:
            ctx.properties.add(prop)
        except DuplicateKeyError as e:
            ctx.errors.append(ParseError(
                kind=ParseErrorKind.DUPLICATE_KEY, line_number=lineno,
                content=raw, message=str(e)))

    def __trailing_comments(self, ctx: _Context) -> None:
        if not ctx.pending:
            return
        if self._config.trailing_comments is TrailingCommentPolicy.DISCARD:
            logger.debug('discarded %d trailing comment(s)', len(ctx.pending))
            return
        doc = ctx.document
        if ctx.section is not None:
            ctx.section.comments.extend(ctx.pending)
        elif doc.global_properties:
            *_, last = doc.global_properties.iter_properties()
            last.comments.extend(ctx.pending)
        else:
            doc.comments.extend(ctx.pending)
        ctx.pending = []


def loads(
    text: str, config: IniParserConfiguration | None = None
) -> IniDocument:
    """Parse INI text, raising `IniParseFailure` with every error found."""
    return IniParser(config).parse(text).unwrap()


def load(
    fp: TextIO, config: IniParserConfiguration | None = None
) -> IniDocument:
    return IniParser(config).parse(fp).unwrap()
