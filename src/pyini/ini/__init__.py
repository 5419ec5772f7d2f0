# -*- encoding: utf-8 -*-
# @File   : __init__.py
# @Time   : 2024/11/02 21:35:02
# @Author : Kariko Lin

from .config import IniParserConfiguration
from .consts import (
    DuplicateKeyPolicy,
    DuplicateSectionPolicy,
    ParseErrorKind,
    TrailingCommentPolicy,
    case_insensitive,
    case_sensitive
)
from .errors import (
    DuplicateKeyError,
    DuplicateSectionError,
    IniError,
    IniParseFailure,
    InvalidArgument,
    ParseError
)
from .file import IniFile
from .formatter import IniFormatter, dump, dumps
from .model import (
    IniDocument,
    Property,
    PropertyCollection,
    Section,
    SectionCollection
)
from .parser import IniParser, ParseResult, ParserState, load, loads
