"""Unit tests for the template tokenizer."""
from __future__ import annotations

from bindql.compile.tokenizer import Segment, SegmentKind, tokenize

T, L, K = SegmentKind.TEXT, SegmentKind.LITERAL, SegmentKind.TOKEN


def _kinds(template: str) -> list[tuple[SegmentKind, str]]:
    return [(s.kind, s.text) for s in tokenize(template)]


def test_segments_concatenate_to_template():
    template = "select a;a, 'x:y' from t where b = :b and c = :t.c"
    assert "".join(s.text for s in tokenize(template)) == template


def test_plain_text_is_one_segment():
    assert list(tokenize("select 1 from dual")) == [Segment(T, "select 1 from dual")]


def test_input_and_output_tokens():
    assert _kinds("select a;a from t where b = :b") == [
        (T, "select a"),
        (K, ";a"),
        (T, " from t where b = "),
        (K, ":b"),
    ]


def test_qualified_token():
    assert _kinds(":cust.zip") == [(K, ":cust.zip")]


def test_literal_contents_are_not_tokens():
    assert _kinds("x = ':y;z'") == [
        (T, "x = "),
        (L, "'"),
        (L, ":y"),
        (L, ";z"),
        (L, "'"),
    ]


def test_unterminated_literal_swallows_rest():
    kinds = {s.kind for s in list(tokenize("x = 'abc :d"))[1:]}
    assert kinds == {L}


def test_marker_needs_alphabetic_start():
    assert _kinds("a::1 and b = :2") == [(T, "a::1 and b = :2")]


def test_postgres_cast_is_tokenized():
    # the second colon starts a token; casts must be written CAST(x AS int)
    assert _kinds("x::int") == [(T, "x:"), (K, ":int")]


def test_semicolon_terminator_without_identifier_is_text():
    assert _kinds("commit;") == [(T, "commit;")]
