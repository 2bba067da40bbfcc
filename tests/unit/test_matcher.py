from __future__ import annotations

from prefloc.matcher import match, remove_saved
from tests.helpers import make_rule


def test_first_rule_in_order_wins() -> None:
    broad = make_rule("/project", show_hidden=True)
    narrow = make_rule("/user/project", show_hidden=False)

    assert match([broad, narrow], "/home/user/project") is broad
    assert match([narrow, broad], "/home/user/project") is narrow


def test_no_match_returns_none() -> None:
    assert match([make_rule("/a"), make_rule("/b")], "/c") is None
    assert match([], "/c") is None


def test_fallback_only_applies_when_nothing_earlier_matches() -> None:
    saved = make_rule("/home/user/project", show_hidden=True)
    fallback = make_rule(".*", literal=False, show_hidden=False, is_predefined=True)
    rules = [saved, fallback]

    assert match(rules, "/home/user/project") is saved
    assert match(rules, "/etc") is fallback


def test_remove_saved_matches_exact_escaped_location() -> None:
    predefined = make_rule("/a.b", literal=False, is_predefined=True)
    nested = make_rule("/x/a.b")
    rules = [predefined, nested, make_rule("/a.b")]

    assert remove_saved(rules, "/a.b") == 1
    assert rules == [predefined, nested]


def test_remove_saved_ignores_predefined_rules() -> None:
    rules = [make_rule("/a", is_predefined=True)]
    assert remove_saved(rules, "/a") == 0
    assert len(rules) == 1


def test_remove_saved_drops_duplicates() -> None:
    other = make_rule("/b")
    rules = [make_rule("/a", show_hidden=True), other, make_rule("/a", show_hidden=False)]

    assert remove_saved(rules, "/a") == 2
    assert rules == [other]
