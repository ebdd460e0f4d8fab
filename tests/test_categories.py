#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
import random
from collections import Counter

import pytest

from dayledger.categories import (
    canonical_name,
    canonicalize_categories,
    find_similar_tasks,
    normalise_title,
    should_merge,
)
from dayledger.constants import DARK_PALETTE, LIGHT_PALETTE
from tests.task_utils import make_occurrence, make_template


def _occurrences(*titles: str):
    return [
        make_occurrence("09:00", "10:00", title=title, occurrence_id=f"o{i}")
        for i, title in enumerate(titles)
    ]


@pytest.mark.parametrize(
    "title, normalised",
    [
        ("Co-op", "co op"),
        ("  Deep   work ", "deep work"),
        ("night_shift", "night shift"),
    ],
)
def test_normalise_title(title: str, normalised: str):
    assert normalise_title(title) == normalised


def test_spelling_variants_share_a_category():
    slices = canonicalize_categories(_occurrences("Co-op", "coop", "CO OP"))
    assert len(slices) == 1
    assert slices[0].total_hours == 3.0


def test_gym_and_gymnastics_do_not_merge():
    slices = canonicalize_categories(_occurrences("gym", "gymnastics"))
    assert sorted(s.name for s in slices) == ["gym", "gymnastics"]


@pytest.mark.parametrize(
    "short, long, merged",
    [
        ("gym", "gymnastics", False),
        ("gym", "gym session", True),
        ("gym", "morning gym", True),
        ("co", "co op", True),
        ("op", "co op", False),
        ("co op", "coop", True),
        ("math", "maths revision", False),
    ],
)
def test_should_merge(short: str, long: str, merged: bool):
    assert should_merge(short, long) is merged


def test_word_aligned_titles_merge_into_the_base_name():
    slices = canonicalize_categories(
        _occurrences("Gym", "Gym session", "gym session", "Reading")
    )
    assert [(s.name, s.total_hours) for s in slices] == [("Gym", 3.0), ("Reading", 1.0)]


@pytest.mark.parametrize(
    "titles",
    [
        ("co op", "co op", "coop", "co"),
        ("co op", "coop", "coop", "co"),
    ],
)
def test_merges_do_not_depend_on_the_most_frequent_spelling(titles):
    slices = canonicalize_categories(_occurrences(*titles))
    assert len(slices) == 1
    assert slices[0].total_hours == 4.0


def test_canonical_name():
    assert canonical_name(Counter({"Study": 3, "study": 1})) == "Study"
    # ties go to the shorter title, then to the capitalised one
    assert canonical_name(Counter({"Essay": 1, "essay": 1})) == "Essay"
    assert canonical_name(Counter({"Run": 2, "Running club": 5})) == "Run"
    assert canonical_name(Counter({"Walk": 1, "Walks": 4})) == "Walks"


def test_categories_are_stable_under_shuffling():
    titles = [
        "Co-op",
        "coop",
        "Gym",
        "gym session",
        "gymnastics",
        "Reading",
        "reading",
        "Untidy desk",
        "",
        "CO OP",
    ]
    expected = canonicalize_categories(_occurrences(*titles))
    rng = random.Random(0)
    for _ in range(10):
        shuffled = _occurrences(*titles)
        rng.shuffle(shuffled)
        assert canonicalize_categories(shuffled) == expected


def test_colours_follow_sorted_order():
    slices = canonicalize_categories(_occurrences("zumba", "Art", "music"))
    assert [s.name for s in slices] == ["Art", "music", "zumba"]
    assert [s.color for s in slices] == list(LIGHT_PALETTE[:3])
    dark = canonicalize_categories(_occurrences("zumba", "Art"), palette=DARK_PALETTE)
    assert [s.color for s in dark] == list(DARK_PALETTE[:2])


def test_colours_wrap_around_the_palette():
    titles = [f"task {chr(ord('a') + i)}" for i in range(len(LIGHT_PALETTE) + 2)]
    slices = canonicalize_categories(_occurrences(*titles))
    assert slices[len(LIGHT_PALETTE)].color == LIGHT_PALETTE[0]


def test_untitled_occurrences():
    slices = canonicalize_categories(_occurrences("", "  "))
    assert [(s.name, s.total_hours) for s in slices] == [("Untitled", 2.0)]


def test_find_similar_tasks():
    tasks = [
        make_template("a", title="Coop"),
        make_template("b", title="Co-op shift"),
        make_template("c", title="Groceries"),
    ]
    similar = find_similar_tasks("co-op", tasks)
    assert [s.task.id for s in similar][0] == "a"
    assert similar[0].similarity == 1.0
    assert "c" not in {s.task.id for s in similar}
    assert find_similar_tasks("   ", tasks) == []
