#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
"""Grouping of loosely named tasks into reporting categories.

Users rarely type the same task title twice in exactly the same way ("Co-op",
"coop", "CO OP"), so occupied time is reported per category: a group of
titles which are equal once normalised, or where one title is a word-aligned
part of another ("gym" and "gym session").

Merge rules
-----------
1. Titles whose normalised keys are equal once spaces are removed always
share a category.
2. A shorter key is merged into a longer one only when it appears in it as
whole words. Keys of fewer than `MIN_MERGE_KEY_LENGTH` characters are merged
only when the longer key starts with them ("co" and "co op").
Merges are transitive and computed over the set of keys, so the categories do
not depend on the order of the occurrences.
"""

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import NamedTuple

from rapidfuzz import process
from rapidfuzz.distance import Levenshtein

from dayledger.constants import (
    BASE_NAME_MIN_COUNT,
    BASE_NAME_MIN_SHORTENING,
    LIGHT_PALETTE,
    MAX_SIMILAR_RESULTS,
    MIN_MERGE_KEY_LENGTH,
    SIMILARITY_THRESHOLD,
    UNTITLED_CATEGORY,
)
from dayledger.models import Occurrence, TaskTemplate

logger = logging.getLogger(__name__)


def normalise_title(title: str) -> str:
    """Lower-case, turn hyphens and underscores into spaces and collapse
    whitespace."""
    lowered = title.lower().replace("-", " ").replace("_", " ")
    return " ".join(lowered.split())


def _compact(title: str) -> str:
    return normalise_title(title).replace(" ", "")


def should_merge(short_key: str, long_key: str) -> bool:
    """Whether the category keyed by `short_key` is absorbed by the one keyed
    by `long_key`."""
    if short_key.replace(" ", "") == long_key.replace(" ", ""):
        return True
    if len(short_key) > len(long_key) or not short_key:
        return False
    if f" {short_key} " not in f" {long_key} ":
        return False
    return len(short_key) >= MIN_MERGE_KEY_LENGTH or long_key.startswith(
        f"{short_key} "
    )


def _preference(item: tuple[str, int]) -> tuple:
    title, count = item
    return -count, len(title), not title[:1].isupper(), title


def canonical_name(titles: Counter) -> str:
    """Pick the display name of a category from the titles seen in it.

    The most frequent title wins, ties going to the shorter one, then to the
    capitalised one. A title that is `BASE_NAME_MIN_SHORTENING` characters
    shorter than the winner, or that was seen `BASE_NAME_MIN_COUNT` times,
    replaces it as the base name (eg "gym" over "gym session").
    """
    ranked = sorted(titles.items(), key=_preference)
    best, _ = ranked[0]
    alternates = [
        (title, count)
        for title, count in ranked
        if len(title) < len(best)
        and (
            len(best) - len(title) >= BASE_NAME_MIN_SHORTENING
            or count >= BASE_NAME_MIN_COUNT
        )
    ]
    if not alternates:
        return best
    return min(alternates, key=lambda item: (len(item[0]), *_preference(item)))[0]


@dataclass
class _Group:
    keys: Counter = field(default_factory=Counter)
    titles: Counter = field(default_factory=Counter)
    minutes: int = 0

    def absorb(self, other: "_Group"):
        self.keys.update(other.keys)
        self.titles.update(other.titles)
        self.minutes += other.minutes


class CategorySlice(NamedTuple):
    name: str
    total_hours: float
    color: str


def _find(parents: dict[str, str], node: str) -> str:
    while parents[node] != node:
        parents[node] = parents[parents[node]]
        node = parents[node]
    return node


def _groups_merge(first: _Group, second: _Group) -> bool:
    return any(
        should_merge(*sorted((a, b), key=lambda k: (len(k), k)))
        for a in first.keys
        for b in second.keys
    )


def _merge_groups(groups: dict[str, _Group]) -> list[_Group]:
    ordered = sorted(groups)
    parents = {compact: compact for compact in ordered}
    for i, first in enumerate(ordered):
        for second in ordered[i + 1 :]:
            if _groups_merge(groups[first], groups[second]):
                root_first, root_second = _find(parents, first), _find(parents, second)
                if root_first != root_second:
                    parents[max(root_first, root_second)] = min(root_first, root_second)
    merged: dict[str, _Group] = {}
    for compact in ordered:
        root = _find(parents, compact)
        merged.setdefault(root, _Group()).absorb(groups[compact])
    return list(merged.values())


def canonicalize_categories(
    occurrences: list[Occurrence], palette: tuple[str, ...] = LIGHT_PALETTE
) -> list[CategorySlice]:
    """Group occurrences into categories and total their durations.

    Returns
    -------
    One slice per category, sorted by name. Colours are assigned from
    `palette` by that sorted position, so the same set of occurrences is
    always coloured the same way.
    """
    groups: dict[str, _Group] = {}
    for occurrence in occurrences:
        title = occurrence.title.strip() or UNTITLED_CATEGORY
        key = normalise_title(title)
        group = groups.setdefault(key.replace(" ", ""), _Group())
        group.keys[key] += 1
        group.titles[title] += 1
        group.minutes += occurrence.duration_minutes
    merged = _merge_groups(groups)
    logger.debug(f"Grouped {len(groups)} titles into {len(merged)} categories")
    named = sorted(
        ((canonical_name(g.titles), g.minutes / 60) for g in merged),
        key=lambda item: (item[0].casefold(), item[0]),
    )
    return [
        CategorySlice(name=name, total_hours=hours, color=palette[i % len(palette)])
        for i, (name, hours) in enumerate(named)
    ]


class SimilarTask(NamedTuple):
    task: TaskTemplate
    similarity: float


def find_similar_tasks(
    name: str,
    tasks: list[TaskTemplate],
    threshold: float = SIMILARITY_THRESHOLD,
    max_results: int = MAX_SIMILAR_RESULTS,
) -> list[SimilarTask]:
    """Find existing tasks with a title similar to `name`, most similar first.

    Titles are compared after normalisation with spaces removed, so "co-op"
    and "Coop" are identical. A title contained in the other scores
    `len(shorter) / len(longer)`.
    """
    if not name.strip():
        return []
    matches = process.extract(
        query=name,
        choices=[task.title for task in tasks],
        processor=_compact,
        scorer=Levenshtein.normalized_similarity,
        score_cutoff=threshold,
        limit=max_results,
    )
    return [SimilarTask(task=tasks[index], similarity=score) for _, score, index in matches]
