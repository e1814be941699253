from __future__ import annotations

import pytest

from tunebridge.domain.reconciliation.normalize import (
    extract_primary_title,
    normalize_artist,
    normalize_for_comparison,
    strip_version_suffix,
)


@pytest.mark.parametrize(
    ("title", "expected"),
    [
        ("Suzie Q (Remastered 2014)", "Suzie Q"),
        ("Paint It Black - 2024 Remaster", "Paint It Black"),
        ("Hey Jude - Mono", "Hey Jude"),
        ("Under Pressure - Live at Wembley", "Under Pressure"),
        ("Strobe [Original Mix]", "Strobe"),
        ("Get Lucky (feat. Pharrell Williams)", "Get Lucky"),
        ("Live and Let Die", "Live and Let Die"),
        ("Yesterday", "Yesterday"),
    ],
)
def test_strip_version_suffix(title: str, expected: str) -> None:
    assert strip_version_suffix(title) == expected


def test_normalize_folds_punctuation_and_ampersand() -> None:
    assert normalize_for_comparison("Don’t Stop Me Now") == "dont stop me now"
    assert normalize_for_comparison("Love & Theft") == "love and theft"
    assert normalize_for_comparison("Señor — Tales of Yankee Power") == "señor - tales of yankee power"


def test_normalize_drops_featuring_credit() -> None:
    assert normalize_for_comparison("Empire State of Mind feat. Alicia Keys") == (
        "empire state of mind"
    )
    assert normalize_for_comparison("Stay ft. Justin Bieber") == "stay"


def test_normalize_keeps_ft_inside_words() -> None:
    assert normalize_for_comparison("Left Behind") == "left behind"


@pytest.mark.parametrize(
    "title",
    [
        "Suzie Q (Remastered 2014)",
        "Fortunate Son - Remastered 2014",
        'Song - "Remix"',
        "A (Live) - Remastered 2011 (feat. X)",
        "Song (Live) [Remastered]",
        "'Intro' - 'Live'",
        "Track [feat. Y] - Radio Edit",
        "(Remastered)",
        "feat. Drake",
        "Hey Jude – Mono",
        "Rock & Roll & Soul",
        "Señor — Tales of Yankee Power",
        "War Pigs / Luke's Wall",
        "",
    ],
)
def test_normalize_is_idempotent(title: str) -> None:
    once = normalize_for_comparison(title)

    assert normalize_for_comparison(once) == once


def test_extract_primary_title() -> None:
    assert extract_primary_title("war pigs / lukes wall") == "war pigs"
    assert extract_primary_title("bohemian rhapsody - single edit") == "bohemian rhapsody"
    assert extract_primary_title("yesterday") == "yesterday"


def test_normalize_artist_drops_leading_article() -> None:
    assert normalize_artist("The Beatles") == "beatles"
    assert normalize_artist("Theatre of Tragedy") == "theatre of tragedy"
