#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
from rich.console import Console
from rich.table import Table
from rich.text import Text

from dayledger.aggregation import PeriodTotal
from dayledger.aliases import OccurrenceId
from dayledger.categories import CategorySlice
from dayledger.models import Occurrence
from dayledger.time_utils import format_date, slot_label


def display_occurrences(
    occurrences: list[Occurrence],
    conflicts: set[OccurrenceId] | None = None,
    console: Console | None = None,
):
    """Display occurrences as a rich table with the following format

    ┏━━━━━━━━━━━━┳━━━━━━━━━━┳━━━━━━━━━━┳━━━━━━━━━━━━━━━┳━━━━━━━━━━┳━━━━━━━━━━┓
    ┃ Date       ┃ Start    ┃ End      ┃ Title         ┃ Kind     ┃ Conflict ┃
    ┡━━━━━━━━━━━━╇━━━━━━━━━━╇━━━━━━━━━━╇━━━━━━━━━━━━━━━╇━━━━━━━━━━╇━━━━━━━━━━┩
    """  # noqa

    console = console or Console()
    conflicts = conflicts or set()
    table = Table(show_header=True, header_style="bold magenta", expand=True)

    table.add_column("Date", style="cyan", no_wrap=True)
    table.add_column("Start", justify="right", no_wrap=True)
    table.add_column("End", justify="right", no_wrap=True)
    table.add_column("Title", style="white")
    table.add_column("Kind", style="dim")
    table.add_column("Conflict", justify="center", style="red", no_wrap=True)

    for occurrence in occurrences:
        kind = "recurring" if occurrence.is_instance else "one-off"
        if occurrence.override_applied:
            kind = f"{kind} (edited)"
        table.add_row(
            format_date(occurrence.occurrence_date),
            slot_label(occurrence.start_time),
            slot_label(occurrence.end_time),
            occurrence.title,
            kind,
            "YES" if occurrence.id in conflicts else "",
        )

    console.print(table)


def display_period_totals(
    totals: list[PeriodTotal], console: Console | None = None
):
    console = console or Console()
    table = Table(show_header=True, header_style="bold magenta")

    table.add_column("Period", style="cyan", no_wrap=True)
    table.add_column("Hours", justify="right")
    table.add_column("Sessions", justify="right")
    table.add_column("Active days", justify="right")

    for total in totals:
        table.add_row(
            total.period,
            f"{total.hours:.2f}",
            str(total.sessions),
            str(total.days),
        )

    console.print(table)


def display_categories(
    slices: list[CategorySlice], console: Console | None = None
):
    """Display the category breakdown, each name printed in its colour."""
    console = console or Console()
    table = Table(show_header=True, header_style="bold magenta")

    table.add_column("Category", no_wrap=True)
    table.add_column("Hours", justify="right")
    table.add_column("Share", justify="right")

    total = sum(s.total_hours for s in slices)
    for category in slices:
        share = category.total_hours / total if total else 0.0
        table.add_row(
            Text(category.name, style=category.color),
            f"{category.total_hours:.2f}",
            f"{share:.0%}",
        )

    console.print(table)
