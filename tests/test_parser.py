import io
import logging
from textwrap import dedent

import pytest

from pyini.ini import (
    DuplicateKeyPolicy,
    DuplicateSectionPolicy,
    IniParseFailure,
    IniParser,
    IniParserConfiguration,
    InvalidArgument,
    ParseErrorKind,
    TrailingCommentPolicy,
    load,
    loads
)


def parse(text, **options):
    return IniParser(IniParserConfiguration(**options)).parse(text)


# ==========================================
# Basic structure
# ==========================================


def test_section_with_comment_on_second_key():
    doc = loads("[s1]\nk=v\n;comment\nk2=v2")
    assert list(doc.sections) == ["s1"]
    props = doc.sections["s1"].properties
    assert props.to_dict() == {"k": "v", "k2": "v2"}
    assert props.get_property("k").comments == []
    assert props.get_property("k2").comments == ["comment"]


def test_duplicate_section_merges_by_default():
    doc = loads("[s1]\n[s1]\nk=v")
    assert list(doc.sections) == ["s1"]
    assert doc.sections["s1"].properties.to_dict() == {"k": "v"}


def test_empty_source():
    doc = loads("")
    assert len(doc.sections) == 0
    assert len(doc.global_properties) == 0
    assert doc.comments == []


def test_global_properties_and_sections():
    doc = loads(dedent("""
        ; about the file
        name = demo

        [server]
        host = localhost
        port = 8080

        [client]
        retries=3
    """))
    assert doc.global_properties.to_dict() == {"name": "demo"}
    assert doc.global_properties.get_property("name").comments == [
        "about the file"]
    assert list(doc.sections) == ["server", "client"]
    assert doc.sections["server"]["port"] == "8080"
    assert doc.sections["client"]["retries"] == "3"


def test_comments_attach_to_next_construct_across_blank_lines():
    doc = loads(dedent("""
        # one

        ; two
        [s]

        # three
        k = v
    """))
    assert doc.sections["s"].comments == ["one", "two"]
    assert doc.sections["s"].properties.get_property("k").comments == [
        "three"]


def test_split_on_first_delimiter_only():
    doc = loads("[s]\nurl = http://x/?a=1&b=2")
    assert doc.sections["s"]["url"] == "http://x/?a=1&b=2"


def test_empty_value():
    doc = loads("[s]\nempty =\n")
    assert "empty" in doc.sections["s"]
    assert doc.sections["s"]["empty"] == ""


def test_header_is_trimmed():
    doc = loads("  [  my section ]  \n k = v ")
    assert list(doc.sections) == ["my section"]
    assert doc.sections["my section"]["k"] == "v"


def test_accepts_streams_and_line_lists():
    src = "[s]\r\nk=v\r\n"
    assert load(io.StringIO(src)).sections["s"]["k"] == "v"
    result = IniParser().parse(["[s]\n", "k=v\n"])
    assert result.ok
    assert result.document.sections["s"]["k"] == "v"


def test_byte_order_mark_is_ignored():
    doc = loads("\ufeff[s]\nk=v")
    assert list(doc.sections) == ["s"]


def test_parser_rejects_foreign_config():
    with pytest.raises(InvalidArgument):
        IniParser(config={"skip_invalid_lines": False})


# ==========================================
# Escapes
# ==========================================


def test_escaped_delimiter_and_markers():
    doc = loads(r"[s]" "\n" r"a\=b = c\;d\#e\\f")
    assert doc.sections["s"].properties.to_dict() == {"a=b": "c;d#e\\f"}


def test_unknown_escape_is_kept():
    doc = loads(r"[s]" "\n" r"path = C:\temp\new")
    assert doc.sections["s"]["path"] == r"C:\temp\new"


# ==========================================
# Malformed lines
# ==========================================


def test_malformed_lines_are_skipped_by_default(caplog):
    with caplog.at_level(logging.DEBUG, logger="pyini.ini.parser"):
        result = parse("[s]\njust some words\nk=v\n[broken\n=novalue")
    assert result.ok
    assert result.document.sections["s"].properties.to_dict() == {"k": "v"}
    assert "skipped line 2" in caplog.text


def test_strict_mode_reports_every_error():
    result = parse(
        "[s]\njust some words\nk=v\n[broken\n=novalue\n[]\n[t] tail",
        skip_invalid_lines=False)
    assert not result.ok
    assert result.document is None
    assert [(e.line_number, e.kind) for e in result.errors] == [
        (2, ParseErrorKind.MALFORMED_LINE),
        (4, ParseErrorKind.MISSING_CLOSING_BRACKET),
        (5, ParseErrorKind.MALFORMED_LINE),
        (6, ParseErrorKind.MALFORMED_LINE),
        (7, ParseErrorKind.MALFORMED_LINE),
    ]
    assert result.errors[0].content == "just some words"


def test_unwrap_raises_single_failure():
    with pytest.raises(IniParseFailure) as e:
        loads("[s]\nbad\nworse", IniParserConfiguration(
            skip_invalid_lines=False))
    assert len(e.value.errors) == 2
    assert "line 3" in str(e.value)


def test_skipped_line_does_not_eat_pending_comments():
    doc = loads("[s]\n; c\nnot a pair\nk = v")
    assert doc.sections["s"].properties.get_property("k").comments == ["c"]


# ==========================================
# Duplicate policies
# ==========================================


def test_duplicate_keys_overwrite_by_default():
    doc = loads("[s]\n; a\nk=1\n; b\nk=2")
    prop = doc.sections["s"].properties.get_property("k")
    assert prop.value == "2"
    assert prop.comments == ["a", "b"]


def test_duplicate_keys_first_wins():
    result = parse("[s]\nk=1\nk=2",
                   duplicate_keys=DuplicateKeyPolicy.FIRST_WINS)
    assert result.document.sections["s"]["k"] == "1"


def test_duplicate_keys_concatenate():
    result = parse("[s]\nk=1\nk=2\nk=3",
                   duplicate_keys="concatenate", concatenate_separator=",")
    assert result.document.sections["s"]["k"] == "1,2,3"


def test_duplicate_keys_reject_is_reported_even_when_skipping():
    result = parse("[s]\nk=1\nk=2\nnoise",
                   duplicate_keys=DuplicateKeyPolicy.REJECT)
    assert [(e.line_number, e.kind) for e in result.errors] == [
        (3, ParseErrorKind.DUPLICATE_KEY)]


def test_duplicate_sections_reject():
    result = parse("[s]\nk=1\n[t]\n[s]\nk=2",
                   duplicate_sections=DuplicateSectionPolicy.REJECT)
    assert [(e.line_number, e.kind) for e in result.errors] == [
        (4, ParseErrorKind.DUPLICATE_SECTION)]


def test_duplicate_sections_merge_keeps_first_position():
    doc = loads("; first\n[a]\nx=1\n[b]\n; again\n[a]\ny=2")
    assert list(doc.sections) == ["a", "b"]
    assert doc.sections["a"].properties.to_dict() == {"x": "1", "y": "2"}
    assert doc.sections["a"].comments == ["first", "again"]


def test_duplicate_sections_separate():
    result = parse("[a]\nx=1\n[a]\nx=2",
                   duplicate_sections=DuplicateSectionPolicy.SEPARATE)
    doc = result.document
    assert list(doc.sections) == ["a", "a~2"]
    assert doc.sections["a"]["x"] == "1"
    assert doc.sections["a~2"]["x"] == "2"
    assert doc.sections["a~2"].name == "a"


def test_case_insensitive():
    result = parse("[Main]\nKey=1\n[MAIN]\nkey=2", case_insensitive=True)
    doc = result.document
    assert list(doc.sections) == ["Main"]
    assert doc.sections["main"].properties.to_dict() == {"Key": "2"}


def test_case_sensitive_by_default():
    doc = loads("[Main]\nKey=1\n[MAIN]\nkey=2")
    assert list(doc.sections) == ["Main", "MAIN"]


# ==========================================
# Options
# ==========================================


def test_global_properties_can_be_disallowed():
    result = parse("g=1\n[s]\nk=v", allow_global_properties=False)
    assert result.ok
    assert len(result.document.global_properties) == 0

    result = parse("g=1\n[s]\nk=v", allow_global_properties=False,
                   skip_invalid_lines=False)
    assert [e.line_number for e in result.errors] == [1]


def test_custom_tokens():
    result = parse("// note\n<s>\nk: v", comment_markers=("//",),
                   key_value_delimiter=":", section_delimiters=("<", ">"))
    doc = result.document
    assert doc.sections["s"]["k"] == "v"
    assert doc.sections["s"].comments == ["note"]


def test_no_trim_keeps_whitespace():
    result = parse("[s]\nk = v \n;  spaced", trim_whitespace=False,
                   trailing_comments=TrailingCommentPolicy.PRESERVE)
    sect = result.document.sections["s"]
    assert sect.properties.to_dict() == {"k ": " v "}
    assert sect.comments == [" spaced"]


def test_inline_comments():
    result = parse("[s] ; header note\nk = v ; value note\nu = a\\;b",
                   inline_comments=True)
    sect = result.document.sections["s"]
    assert sect.comments == ["header note"]
    assert sect.properties.get_property("k").comments == ["value note"]
    assert sect["k"] == "v"
    assert sect["u"] == "a;b"


def test_comment_after_header_without_inline_comments():
    doc = loads("[a]\nx=1\n[s] ; note\nk=v\n[t]# other")
    assert list(doc.sections) == ["a", "s", "t"]
    assert doc.sections["a"].properties.to_dict() == {"x": "1"}
    assert doc.sections["s"].properties.to_dict() == {"k": "v"}
    assert doc.sections["s"].comments == ["note"]
    assert doc.sections["t"].comments == ["other"]


def test_escaped_section_name():
    doc = loads(r"[a\;b\]c]" "\n" "k=v")
    assert list(doc.sections) == ["a;b]c"]


def test_markers_inside_values_are_plain_text_by_default():
    doc = loads("[s]\ncolor = #fff ; not a comment")
    assert doc.sections["s"]["color"] == "#fff ; not a comment"


def test_multiline_values():
    src = dedent("""\
        [s]
        text = first \\
            second \\
            third
        next = \\n escaped
    """)
    result = parse(src, multiline_values=True)
    sect = result.document.sections["s"]
    assert sect["text"] == "first\nsecond\nthird"
    assert sect["next"] == "\n escaped"


def test_multiline_value_closed_by_end_of_input():
    result = parse("[s]\nk = a \\", multiline_values=True)
    assert result.document.sections["s"]["k"] == "a"


def test_continuation_is_plain_text_without_multiline():
    doc = loads("[s]\nk = a \\\nb = c")
    assert doc.sections["s"].properties.to_dict() == {"k": "a \\", "b": "c"}


def test_trailing_comments_discarded_by_default():
    doc = loads("[s]\nk=v\n; dangling")
    assert doc.sections["s"].comments == []
    assert doc.sections["s"].properties.get_property("k").comments == []


def test_trailing_comments_preserved():
    preserve = {"trailing_comments": TrailingCommentPolicy.PRESERVE}
    doc = parse("[s]\nk=v\n; dangling", **preserve).document
    assert doc.sections["s"].comments == ["dangling"]

    doc = parse("g=1\n; dangling", **preserve).document
    assert doc.global_properties.get_property("g").comments == ["dangling"]

    doc = parse("; only a comment", **preserve).document
    assert doc.comments == ["only a comment"]
