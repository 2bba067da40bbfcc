"""First-match lookup over a preference table."""

from __future__ import annotations

from prefloc.models import PreferenceRule, escape


def match(rules: list[PreferenceRule], path: str) -> PreferenceRule | None:
    """Return the first rule whose location matches the end of *path*.

    Table order decides; there is no scoring or longest-match preference,
    so catch-all fallbacks must come last.
    """
    for rule in rules:
        if rule.matches(path):
            return rule
    return None


def remove_saved(rules: list[PreferenceRule], path: str) -> int:
    """Drop every user-saved rule stored for exactly *path*, in place.

    Returns how many were removed. A hand-edited file or a sibling's
    payload can hold more than one.
    """
    pattern = escape(path)
    kept = [r for r in rules if r.is_predefined or r.location.pattern != pattern]
    removed = len(rules) - len(kept)
    rules[:] = kept
    return removed
