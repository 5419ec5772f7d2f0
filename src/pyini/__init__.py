# -*- encoding: utf-8 -*-
# @File   : __init__.py
# @Time   : 2024/11/02 21:30:44
# @Author : Kariko Lin

import logging

from .ini import (
    IniDocument,
    IniFile,
    IniFormatter,
    IniParseFailure,
    IniParser,
    IniParserConfiguration,
    Property,
    PropertyCollection,
    Section,
    SectionCollection,
    dump,
    dumps,
    load,
    loads
)

__all__ = [
    'IniDocument', 'IniParser', 'IniFormatter', 'IniParserConfiguration',
    'IniParseFailure', 'IniFile',
    'Property', 'PropertyCollection', 'Section', 'SectionCollection',
    'load', 'loads', 'dump', 'dumps'
]

logging.basicConfig(level=logging.INFO,
                    format='[%(asctime)s] %(levelname)s: %(message)s')
