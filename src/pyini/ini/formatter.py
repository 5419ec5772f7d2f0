# -*- encoding: utf-8 -*-
# @File   : formatter.py
# @Time   : 2024/11/03 20:11:09
# @Author : Kariko Lin

from io import StringIO
from typing import Iterator, TextIO
from warnings import warn

from .config import IniParserConfiguration
from .errors import InvalidArgument
from .escape import escape
from .model import IniDocument, Property, Section

__all__ = ['IniFormatter', 'dumps', 'dump']


class IniFormatter:
    """`IniDocument` to text, readable again by an `IniParser`
    with the same configuration."""

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

    def __escape(self, text: str) -> str:
        if '\n' in text and not self._config.multiline_values:
            warn(f'"{text[:16]}..." contains a new line, which would be '
                 'read back as a literal "\\n" as multi-line values are off.')
        return escape(text, self._config.specials)

    def __comments(self, comments: list[str]) -> Iterator[str]:
        marker = self._config.comment_marker
        for i in comments:
            yield f'{marker} {i}' if i else marker

    def __property(self, prop: Property) -> Iterator[str]:
        yield from self.__comments(prop.comments)
        spacer = (self._config.assignment_spacer
                  if self._config.trim_whitespace else '')
        yield (f'{self.__escape(prop.key)}'
               f'{spacer}{self._config.key_value_delimiter}{spacer}'
               f'{self.__escape(prop.value)}')

    def __section(self, section: Section) -> Iterator[str]:
        opening, closing = self._config.section_delimiters
        yield from self.__comments(section.comments)
        yield f'{opening}{self.__escape(section.name)}{closing}'
        for i in section.properties.iter_properties():
            yield from self.__property(i)

    def iterlines(self, doc: IniDocument) -> Iterator[str]:
        """Output lines, without line terminators."""
        blocks: list[list[str]] = []
        head = list(self.__comments(doc.comments))
        for i in doc.global_properties.iter_properties():
            head.extend(self.__property(i))
        if head:
            blocks.append(head)
        for sect in doc.sections.values():
            blocks.append(list(self.__section(sect)))  # type: ignore[arg-type]

        for i, block in enumerate(blocks):
            if i > 0:
                yield from [''] * self._config.section_spacing
            yield from block

    def write(self, doc: IniDocument, sink: TextIO) -> None:
        for i in self.iterlines(doc):
            sink.write(i)
            sink.write(self._config.new_line)

    def format(self, doc: IniDocument) -> str:
        with StringIO() as buf:
            self.write(doc, buf)
            return buf.getvalue()


def dumps(
    doc: IniDocument, config: IniParserConfiguration | None = None
) -> str:
    """Serialize with `config`, or with the configuration `doc` was made by.
    """
    return IniFormatter(config or doc.config).format(doc)


def dump(
    doc: IniDocument, fp: TextIO,
    config: IniParserConfiguration | None = None
) -> None:
    IniFormatter(config or doc.config).write(doc, fp)
