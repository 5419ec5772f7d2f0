# -*- encoding: utf-8 -*-
# @File   : file.py
# @Time   : 2024/11/04 00:36:18
# @Author : Kariko Lin

"""INI files on disk. The parser itself never opens anything."""

import logging
from io import StringIO
from os import PathLike

import chardet

from ..abstract import FileHandler
from .config import IniParserConfiguration
from .formatter import IniFormatter
from .model import IniDocument
from .parser import IniParser, ParseResult

__all__ = ['IniFile']

logger = logging.getLogger(__name__)


class IniFile(FileHandler[IniDocument]):
    def __init__(
        self, filename: str | PathLike[str],
        config: IniParserConfiguration | None = None,
        encoding: str | None = None
    ) -> None:
        super().__init__(filename)
        self._codec = encoding
        self._parser = IniParser(config)
        self._formatter = IniFormatter(self._parser.config)

    @property
    def config(self) -> IniParserConfiguration:
        return self._parser.config

    @staticmethod
    def _decode_file(filename: str) -> StringIO:
        with open(filename, 'rb') as fp:
            raw = fp.read()

        codec = chardet.detect(raw)
        if codec is None or codec['encoding'] is None \
                or codec['confidence'] < 0.8:
            codec = {'encoding': 'utf-8'}

        # fallbacks
        try:
            buf = raw.decode(codec['encoding'])
        except UnicodeDecodeError:
            logger.warning('%s is not %s either, decoding as GBK.',
                           filename, codec['encoding'])
            buf = raw.decode('gbk')
        return StringIO(buf)

    def parse(self) -> ParseResult:
        """Read the file into a `ParseResult`, keeping every parse error."""
        try:
            # when encoding is None, `open()` would fallback to system default.
            # and when encoding got wrong,
            # just `UnicodeDecodeError` and fallback to `chardet`.
            with open(self._fn, 'r', encoding=self._codec, newline='') as fp:
                return self._parser.parse(fp.read())
        except UnicodeDecodeError:
            logger.info('%s is not %s, guessing its encoding.',
                        self._fn, self._codec or 'the system default')
            return self._parser.parse(self._decode_file(self._fn))

    def read(self) -> IniDocument:
        """Raises `IniParseFailure` if the file does not parse cleanly."""
        return self.parse().unwrap()

    def write(self, instance: IniDocument) -> None:
        # line endings come from the configuration, not the platform.
        with open(self._fn, 'w', encoding=self._codec or 'utf-8',
                  newline='') as fp:
            self._formatter.write(instance, fp)

    def __str__(self) -> str:
        return "INI file: " + super().__str__() + f"({self._codec})"
