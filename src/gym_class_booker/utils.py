"""Small text helpers for scraping the gym website."""

from __future__ import annotations

import re


def normalise_whitespace(text: str) -> str:
    """Collapse repeated whitespace into single spaces."""
    return re.sub(r"\s+", " ", text or "").strip()


def club_slug(club_name: str) -> str:
    """URL path segment the legacy site uses for a club, e.g. ``Fiction Club`` -> ``fiction-club``."""
    return club_name.lower().replace(" ", "-")
