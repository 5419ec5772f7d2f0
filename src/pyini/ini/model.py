# -*- encoding: utf-8 -*-
# @File   : model.py
# @Time   : 2024/11/02 22:15:31
# @Author : Kariko Lin

"""
Basically INI Structure, comments included.

Every container here *owns* what it stores: whatever you hand over is
copied, so two documents never share a property or a section.
"""

from collections.abc import Iterable, Iterator, Mapping, MutableMapping
from typing import Self

from .config import IniParserConfiguration
from .consts import (
    SEPARATE_KEY_MARK,
    Comparer,
    DuplicateKeyPolicy,
    DuplicateSectionPolicy,
    case_sensitive
)
from .errors import DuplicateKeyError, DuplicateSectionError, InvalidArgument

__all__ = [
    'Property', 'PropertyCollection',
    'Section', 'SectionCollection',
    'IniDocument'
]

_MISSING = object()


def _check_name(name: object, what: str) -> str:
    if not isinstance(name, str) or not name:
        raise InvalidArgument(f'{what} can not be empty')
    return name


class Property:
    """A `key=value` pair, along with the comment lines above it."""

    __slots__ = ('_key', 'value', 'comments')

    def __init__(
        self, key: str, value: str = '',
        comments: Iterable[str] | None = None
    ) -> None:
        self._key = _check_name(key, 'key')
        self.value = value
        self.comments: list[str] = list(comments) if comments else []

    @property
    def key(self) -> str:
        return self._key

    def deepclone(self) -> 'Property':
        return Property(self._key, self.value, self.comments)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Property):
            return NotImplemented
        return (self._key == other._key
                and self.value == other.value
                and self.comments == other.comments)

    def __repr__(self) -> str:
        return (f'Property({self._key!r}, {self.value!r}, '
                f'comments={self.comments!r})')


class PropertyCollection(MutableMapping[str, str]):
    """Ordered `key: value` dict, though the values are `Property` inside.

    Looking up a missing key gives an empty string instead of `KeyError`,
    so `key in collection` is the way to tell "absent" from "empty".
    Only `del collection[key]` raises for a missing key, as `dict` does.
    """

    def __init__(
        self, comparer: Comparer = case_sensitive, *,
        duplicates: DuplicateKeyPolicy = DuplicateKeyPolicy.OVERWRITE,
        separator: str = ','
    ) -> None:
        self._comparer = comparer
        self._duplicates = DuplicateKeyPolicy(duplicates)
        self._separator = separator
        # normalized key -> property, which remembers the original key.
        self.__data: dict[str, Property] = {}

    @classmethod
    def from_collection(
        cls, ori: 'PropertyCollection',
        comparer: Comparer | None = None
    ) -> Self:
        """Deep copy of `ori`, optionally re-keyed with another comparer."""
        ret = cls(comparer or ori._comparer,
                  duplicates=ori._duplicates,
                  separator=ori._separator)
        for i in ori.iter_properties():
            ret.__data[ret._comparer(i.key)] = i.deepclone()
        return ret

    @property
    def comparer(self) -> Comparer:
        return self._comparer

    @property
    def duplicates(self) -> DuplicateKeyPolicy:
        return self._duplicates

    def __norm(self, key: object) -> str | None:
        return self._comparer(key) if isinstance(key, str) else None

    def get_property(self, key: str) -> Property | None:
        return self.__data.get(self.__norm(key))

    def iter_properties(self) -> Iterator[Property]:
        yield from self.__data.values()

    def add(self, item: str | Property) -> bool:
        """Add a new empty key, or a copy of a `Property`.

        If the key exists already, the duplicate policy decides:

            - `OVERWRITE`: take the incoming value, append incoming comments,
            - `CONCATENATE`: join both values with the separator instead,
            - `FIRST_WINS`: keep the existing one untouched,
            - `REJECT`: raise `DuplicateKeyError`.

        Returns `True` only if a new key got inserted.
        """
        prop = (item.deepclone() if isinstance(item, Property)
                else Property(item))
        norm = self._comparer(prop.key)
        if (old := self.__data.get(norm)) is None:
            self.__data[norm] = prop
            return True
        match self._duplicates:
            case DuplicateKeyPolicy.OVERWRITE:
                old.value = prop.value
                old.comments.extend(prop.comments)
            case DuplicateKeyPolicy.CONCATENATE:
                old.value = f'{old.value}{self._separator}{prop.value}'
                old.comments.extend(prop.comments)
            case DuplicateKeyPolicy.REJECT:
                raise DuplicateKeyError(prop.key)
        return False

    def add_key_and_value(self, key: str, value: str) -> bool:
        """Add `key` or update its value, ignoring the duplicate policy."""
        if (old := self.get_property(key)) is not None:
            old.value = value
            return False
        self.__data[self._comparer(key)] = Property(key, value)
        return True

    def remove(self, key: str) -> bool:
        return self.__data.pop(self.__norm(key), None) is not None

    def merge(self, other: 'PropertyCollection') -> None:
        """Values from `other` win; comments are appended, never replaced."""
        for i in list(other.iter_properties()):
            if (old := self.get_property(i.key)) is None:
                self.__data[self._comparer(i.key)] = i.deepclone()
            else:
                old.value = i.value
                old.comments.extend(list(i.comments))

    def clear_comments(self) -> None:
        for i in self.__data.values():
            i.comments.clear()

    def clear(self) -> None:
        self.__data.clear()

    def deepclone(self) -> Self:
        return self.from_collection(self)

    def to_dict(self) -> dict[str, str]:
        return {i.key: i.value for i in self.__data.values()}

    def to_type_list(self) -> list[str]:
        """Collects an *ordered* values sequence, with elements *unique*.

        Mainly serves for the "type list", i.e.
        ```ini
        [BuildingTypes]
        0 = GACNST
        ```
        """
        ret: dict[str, None] = {}
        for i in self.__data.values():
            if i.value:
                ret.setdefault(i.value, None)
        return list(ret)

    def __getitem__(self, key: str) -> str:
        prop = self.get_property(key)
        return '' if prop is None else prop.value

    def __setitem__(self, key: str, value: str) -> None:
        self.add_key_and_value(key, value)

    def __delitem__(self, key: str) -> None:
        if not self.remove(key):
            raise KeyError(key)

    def __contains__(self, key: object) -> bool:
        return self.__norm(key) in self.__data

    def __iter__(self) -> Iterator[str]:
        return (i.key for i in self.__data.values())

    def __len__(self) -> int:
        return len(self.__data)

    # the mixins of `MutableMapping` rely on `KeyError` from `__getitem__`.
    def get(self, key: str, default: str | None = None) -> str | None:
        prop = self.get_property(key)
        return default if prop is None else prop.value

    def pop(self, key: str, default: object = _MISSING) -> str:
        prop = self.__data.pop(self.__norm(key), None)
        if prop is not None:
            return prop.value
        if default is _MISSING:
            raise KeyError(key)
        return default  # type: ignore[return-value]

    def setdefault(self, key: str, default: str = '') -> str:
        if key not in self:
            self.add_key_and_value(key, default)
        return self[key]

    def __eq__(self, other: object) -> bool:
        if isinstance(other, PropertyCollection):
            return (list(self.iter_properties())
                    == list(other.iter_properties()))
        return super().__eq__(other)

    def __repr__(self) -> str:
        return f'{type(self).__name__}({self.to_dict()!r})'


class Section:
    """A named group of properties, along with the comments above its header.
    """

    def __init__(
        self, name: str, comparer: Comparer = case_sensitive, *,
        duplicates: DuplicateKeyPolicy = DuplicateKeyPolicy.OVERWRITE,
        separator: str = ','
    ) -> None:
        self._name = _check_name(name, 'section name')
        self.comments: list[str] = []
        self._properties = PropertyCollection(
            comparer, duplicates=duplicates, separator=separator)

    @classmethod
    def from_section(
        cls, ori: 'Section', comparer: Comparer | None = None
    ) -> Self:
        """Deep copy of `ori`: comments and properties are not shared."""
        ret = cls(ori.name, comparer or ori.comparer)
        ret.comments = list(ori.comments)
        ret._properties = PropertyCollection.from_collection(
            ori._properties, comparer)
        return ret

    @property
    def name(self) -> str:
        return self._name

    @name.setter
    def name(self, value: str) -> None:
        # an empty name is silently ignored.
        if isinstance(value, str) and value:
            self._name = value

    @property
    def comparer(self) -> Comparer:
        return self._properties.comparer

    @property
    def properties(self) -> PropertyCollection:
        return self._properties

    @properties.setter
    def properties(self, value: PropertyCollection | Mapping[str, str]) -> None:
        if isinstance(value, PropertyCollection):
            self._properties = PropertyCollection.from_collection(
                value, self.comparer)
            return
        ret = PropertyCollection(
            self.comparer,
            duplicates=self._properties.duplicates,
            separator=self._properties._separator)
        for k, v in value.items():
            ret.add_key_and_value(k, v)
        self._properties = ret

    def clear_comments(self) -> None:
        """Deletes the comments of the section and of every property in it."""
        self.comments.clear()
        self._properties.clear_comments()

    def clear_properties(self) -> None:
        self._properties.clear()

    def merge(self, other: 'Section') -> None:
        """Properties are added or overwritten; comments are always added."""
        self._properties.merge(other._properties)
        self.comments.extend(list(other.comments))

    def deepclone(self) -> Self:
        return self.from_section(self)

    def __getitem__(self, key: str) -> str:
        return self._properties[key]

    def __setitem__(self, key: str, value: str) -> None:
        self._properties[key] = value

    def __contains__(self, key: object) -> bool:
        return key in self._properties

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Section):
            return NotImplemented
        return (self._name == other._name
                and self.comments == other.comments
                and self._properties == other._properties)

    def __str__(self) -> str:
        return f'[{self._name}]'

    def __repr__(self) -> str:
        return '[%s] { .cnt = %d }' % (self._name, len(self._properties))


class SectionCollection(MutableMapping[str, Section]):
    """Ordered `name: Section` dict.

    A missing name gives `None` rather than `KeyError`. Assigning a section
    (or a plain `dict` of pairs) stores a copy under the given name.
    """

    def __init__(
        self, comparer: Comparer = case_sensitive, *,
        duplicates: DuplicateSectionPolicy = DuplicateSectionPolicy.MERGE,
        key_duplicates: DuplicateKeyPolicy = DuplicateKeyPolicy.OVERWRITE,
        separator: str = ','
    ) -> None:
        self._comparer = comparer
        self._duplicates = DuplicateSectionPolicy(duplicates)
        self._key_duplicates = DuplicateKeyPolicy(key_duplicates)
        self._separator = separator
        # normalized key -> (key, section). the key usually equals
        # the section name, except for `SEPARATE` duplicates.
        self.__data: dict[str, tuple[str, Section]] = {}

    @classmethod
    def from_collection(
        cls, ori: 'SectionCollection',
        comparer: Comparer | None = None
    ) -> Self:
        ret = cls(comparer or ori._comparer,
                  duplicates=ori._duplicates,
                  key_duplicates=ori._key_duplicates,
                  separator=ori._separator)
        for key, sect in ori.__data.values():
            ret.__data[ret._comparer(key)] = (
                key, Section.from_section(sect, ret._comparer))
        return ret

    @property
    def comparer(self) -> Comparer:
        return self._comparer

    @property
    def duplicates(self) -> DuplicateSectionPolicy:
        return self._duplicates

    def __norm(self, key: object) -> str | None:
        return self._comparer(key) if isinstance(key, str) else None

    def __new_section(self, name: str) -> Section:
        return Section(name, self._comparer,
                       duplicates=self._key_duplicates,
                       separator=self._separator)

    def __separate_key(self, name: str) -> str:
        i = 2
        while self._comparer(key := f'{name}{SEPARATE_KEY_MARK}{i}') \
                in self.__data:
            i += 1
        return key

    def _place(self, section: Section) -> Section:
        """for IniParser. Stores `section` itself (no copy) under
        the duplicate policy, and returns the one that should receive
        further properties."""
        norm = self._comparer(section.name)
        if norm not in self.__data:
            self.__data[norm] = (section.name, section)
            return section
        match self._duplicates:
            case DuplicateSectionPolicy.MERGE:
                existing = self.__data[norm][1]
                existing.merge(section)
                return existing
            case DuplicateSectionPolicy.SEPARATE:
                key = self.__separate_key(section.name)
                self.__data[self._comparer(key)] = (key, section)
                return section
            case _:
                raise DuplicateSectionError(section.name)

    def add(self, item: str | Section) -> bool:
        """Add a new empty section, or a copy of a `Section`.

        Existing names are handled by the duplicate section policy.
        Returns `True` only if a new entry got inserted.
        """
        section = (Section.from_section(item, self._comparer)
                   if isinstance(item, Section)
                   else self.__new_section(_check_name(item, 'section name')))
        before = len(self.__data)
        self._place(section)
        return len(self.__data) > before

    def remove(self, key: str) -> bool:
        return self.__data.pop(self.__norm(key), None) is not None

    def rename(self, old: str, new: str) -> bool:
        """Rename a section, keeping its position.

        Returns `True` if succeed, otherwise `False`.
        May not success if `old` is not found or `new` already exists.
        """
        _check_name(new, 'section name')
        src, dst = self.__norm(old), self._comparer(new)
        if src not in self.__data or (dst in self.__data and dst != src):
            return False
        self.__data = {
            (dst if k == src else k): ((new, v[1]) if k == src else v)
            for k, v in self.__data.items()
        }
        self.__data[dst][1].name = new
        return True

    def merge(self, other: 'SectionCollection') -> None:
        """Existing sections get merged, new ones are appended as copies."""
        for key, sect in list(other.__data.values()):
            norm = self._comparer(key)
            if norm in self.__data:
                self.__data[norm][1].merge(sect)
            else:
                self.__data[norm] = (
                    key, Section.from_section(sect, self._comparer))

    def clear_comments(self) -> None:
        for _, sect in self.__data.values():
            sect.clear_comments()

    def clear(self) -> None:
        self.__data.clear()

    def deepclone(self) -> Self:
        return self.from_collection(self)

    def __getitem__(self, key: str) -> Section | None:  # type: ignore[override]
        item = self.__data.get(self.__norm(key))
        return None if item is None else item[1]

    def __setitem__(
        self, key: str, value: Section | Mapping[str, str]
    ) -> None:
        _check_name(key, 'section name')
        norm = self._comparer(key)
        if norm in self.__data:
            # keep position and the original spelling of the key.
            key = self.__data[norm][0]
        if isinstance(value, Section):
            sect = Section.from_section(value, self._comparer)
            sect.name = key
        else:
            sect = self.__new_section(key)
            sect.properties = value
        self.__data[norm] = (key, sect)

    def __delitem__(self, key: str) -> None:
        if not self.remove(key):
            raise KeyError(key)

    def __contains__(self, key: object) -> bool:
        return self.__norm(key) in self.__data

    def __iter__(self) -> Iterator[str]:
        return (key for key, _ in self.__data.values())

    def __len__(self) -> int:
        return len(self.__data)

    def get(  # type: ignore[override]
        self, key: str, default: Section | None = None
    ) -> Section | None:
        item = self.__data.get(self.__norm(key))
        return default if item is None else item[1]

    def pop(self, key: str, default: object = _MISSING) -> Section:
        item = self.__data.pop(self.__norm(key), None)
        if item is not None:
            return item[1]
        if default is _MISSING:
            raise KeyError(key)
        return default  # type: ignore[return-value]

    def setdefault(  # type: ignore[override]
        self, key: str, default: Section | Mapping[str, str] | None = None
    ) -> Section:
        if key not in self:
            self[key] = {} if default is None else default
        return self[key]  # type: ignore[return-value]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SectionCollection):
            return NotImplemented
        return list(self.__data.values()) == list(other.__data.values())

    def __repr__(self) -> str:
        return f'{type(self).__name__}({list(self)!r})'


class IniDocument:
    """A whole INI file: comments and properties before the first header,
    then the sections.

    The comparer and duplicate policies of every collection come from
    `config`, which defaults to `IniParserConfiguration()`.
    """

    def __init__(self, config: IniParserConfiguration | None = None) -> None:
        if config is None:
            config = IniParserConfiguration()
        elif not isinstance(config, IniParserConfiguration):
            raise InvalidArgument(
                f'expect IniParserConfiguration, got {type(config).__name__}')
        self._config = config
        self.comments: list[str] = []
        self.global_properties = PropertyCollection(
            config.comparer,
            duplicates=config.duplicate_keys,
            separator=config.concatenate_separator)
        self.sections = SectionCollection(
            config.comparer,
            duplicates=config.duplicate_sections,
            key_duplicates=config.duplicate_keys,
            separator=config.concatenate_separator)

    @classmethod
    def from_document(cls, ori: 'IniDocument') -> Self:
        ret = cls(ori._config)
        ret.comments = list(ori.comments)
        ret.global_properties = ori.global_properties.deepclone()
        ret.sections = ori.sections.deepclone()
        return ret

    @property
    def config(self) -> IniParserConfiguration:
        return self._config

    def merge(self, other: 'IniDocument') -> None:
        """To merge `other` into self, `other` stays untouched."""
        self.comments.extend(list(other.comments))
        self.global_properties.merge(other.global_properties)
        self.sections.merge(other.sections)

    def clear_comments(self) -> None:
        self.comments.clear()
        self.global_properties.clear_comments()
        self.sections.clear_comments()

    def clear(self) -> None:
        self.comments.clear()
        self.global_properties.clear()
        self.sections.clear()

    def deepclone(self) -> Self:
        return self.from_document(self)

    def to_dict(self) -> dict[str, dict[str, str]]:
        """Plain `{section: {key: value}}` snapshot.

        Global properties, if any, go under the key `''`.
        """
        ret: dict[str, dict[str, str]] = {}
        if self.global_properties:
            ret[''] = self.global_properties.to_dict()
        for key, sect in self.sections.items():
            ret[key] = sect.properties.to_dict()  # type: ignore[union-attr]
        return ret

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, IniDocument):
            return NotImplemented
        return (self.comments == other.comments
                and self.global_properties == other.global_properties
                and self.sections == other.sections)

    def __repr__(self) -> str:
        return (f'<{type(self).__name__} globals={len(self.global_properties)}'
                f' sections={list(self.sections)!r}>')
