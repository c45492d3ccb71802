"""Unit tests for column rules and the list builders."""
from __future__ import annotations

import pytest

from bindql.compile.lists import ListBuilder
from bindql.errors import ColumnRuleFormatError, UnknownColumnRuleTypeError
from bindql.schema.rules import ColumnRuleRegistry, parse_rule, sql_safe

BASE = "to_date('20000101000000','yyyymmddhh24miss')"


def _lists(**rules: str) -> ListBuilder:
    registry = ColumnRuleRegistry()
    for column, rule in rules.items():
        registry.register(column, rule)
    return ListBuilder(registry)


# ---------------------------------------------------------------------------
# sql_safe
# ---------------------------------------------------------------------------


def test_sql_safe_digits_unchanged():
    assert sql_safe("20000101") == "20000101"
    assert sql_safe(42) == "42"


def test_sql_safe_escapes_quotes_and_backslashes():
    assert sql_safe("it's") == "it\\'s"
    assert sql_safe("a\\b") == "a\\\\b"


# ---------------------------------------------------------------------------
# Rule parsing
# ---------------------------------------------------------------------------


def test_date_rule():
    rule = parse_rule("CREATED", "DATE(yyyymmdd)")
    assert rule.select == "to_char(CREATED, 'yyyymmdd')"
    assert rule.insert == "to_date(:CREATED, 'yyyymmdd')"
    assert rule.update == rule.insert
    assert rule.where == rule.insert
    assert rule.aliased("c") == "to_char(c.CREATED, 'yyyymmdd')"


def test_sysdate_rule():
    rule = parse_rule("STAMP", "sysdate(yyyymmdd)")
    assert rule.insert == "SYSDATE"
    assert rule.update == "SYSDATE"
    assert rule.where == "to_date(:STAMP, 'yyyymmdd')"
    assert rule.select == "to_char(STAMP, 'yyyymmdd')"


def test_since_rule():
    rule = parse_rule("AGE", "SINCE(20000101000000)")
    assert rule.select == f"floor((AGE - {BASE}) * 86400)"
    assert rule.insert == f"({BASE} + (:AGE / 86400))"
    assert rule.aliased("x") == f"floor((x.AGE - {BASE}) * 86400)"


@pytest.mark.parametrize("rule", ["DATE", "DATE(", "(fmt)", "DATE(fmt) extra"])
def test_malformed_rule(rule):
    with pytest.raises(ColumnRuleFormatError):
        parse_rule("C", rule)


def test_unknown_rule_type():
    with pytest.raises(UnknownColumnRuleTypeError) as exc_info:
        parse_rule("C", "EPOCH(1970)")
    assert exc_info.value.details["type"] == "EPOCH"


def test_registry_keeps_nothing_on_failure():
    registry = ColumnRuleRegistry()
    with pytest.raises(ColumnRuleFormatError):
        registry.register("c", "nope")
    assert "C" not in registry
    assert len(registry) == 0


# ---------------------------------------------------------------------------
# List builders
# ---------------------------------------------------------------------------


def test_plain_lists():
    lists = ListBuilder()
    cols = ["name", "zip"]
    assert lists.select_list(cols) == "NAME;NAME, ZIP;ZIP"
    assert lists.select_list_alias("c", cols) == "c.NAME;NAME, c.ZIP;ZIP"
    assert lists.where_list(cols) == "NAME = :NAME and ZIP = :ZIP"
    assert lists.where_list_alias("c", cols) == "c.NAME = :NAME and c.ZIP = :ZIP"
    assert lists.values_list(cols) == ":NAME, :ZIP"
    assert lists.update_list(cols) == "NAME = :NAME, ZIP = :ZIP"


def test_lists_apply_rules():
    lists = _lists(CREATED="DATE(yyyymmdd)")
    cols = ["ID", "CREATED"]
    assert lists.select_list(cols) == "ID;ID, to_char(CREATED, 'yyyymmdd');CREATED"
    assert lists.select_list_alias("t", cols) == "t.ID;ID, to_char(t.CREATED, 'yyyymmdd');CREATED"
    assert lists.where_list(cols) == "ID = :ID and CREATED = to_date(:CREATED, 'yyyymmdd')"
    assert lists.values_list(cols) == ":ID, to_date(:CREATED, 'yyyymmdd')"
    assert lists.update_list(cols) == "ID = :ID, CREATED = to_date(:CREATED, 'yyyymmdd')"


def test_sysdate_values_list_has_no_token():
    lists = _lists(STAMP="SYSDATE(yyyymmdd)")
    assert lists.values_list(["stamp"]) == "SYSDATE"


def test_empty_lists():
    lists = ListBuilder()
    assert lists.select_list([]) == ""
    assert lists.where_list([]) == ""
