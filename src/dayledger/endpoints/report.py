#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
import logging
from pathlib import Path
from typing import Any

import hydra
from omegaconf import DictConfig, OmegaConf

import dayledger.utils  # noqa: F401  registers the config resolvers
from dayledger.aggregation import (
    hourly_distribution,
    period_totals,
    summarise_range,
)
from dayledger.constants import REPORT_FILE_STEM
from dayledger.display import (
    display_categories,
    display_occurrences,
    display_period_totals,
)
from dayledger.engine import EngineSettings, ScheduleEngine, get_engine_settings
from dayledger.occurrences import group_by_date
from dayledger.readers import load_snapshot
from dayledger.store import TaskStore
from dayledger.time_utils import HiddenRange, format_date, iter_dates, parse_date
from dayledger.writers import save_json, save_nestedtext

logger = logging.getLogger(__name__)

_REPORT_WRITERS = {"json": save_json, "nt": save_nestedtext}


def _engine_settings(cfg: DictConfig) -> EngineSettings:
    defaults = get_engine_settings(cfg.theme)
    hidden_ranges = OmegaConf.to_container(cfg.hidden_ranges, resolve=True)
    return defaults._replace(
        slot_width_minutes=cfg.slot_width_minutes,
        slot_step_minutes=cfg.slot_step_minutes,
        hidden_ranges=tuple(HiddenRange(**r) for r in hidden_ranges),
    )


def run_report(cfg: DictConfig) -> dict[str, Any]:
    """Build the occurrence report of one user over the configured window
    and write it to `cfg.output_dir`.

    Returns
    -------
    The report, as written to disk.
    """
    if cfg.report_format not in _REPORT_WRITERS:
        raise ValueError(
            f"Unknown report format {cfg.report_format}, "
            f"expected one of {tuple(_REPORT_WRITERS)}"
        )
    if cfg.debug:
        logger.info(OmegaConf.to_yaml(cfg, resolve=True))
    store = TaskStore.from_snapshot(load_snapshot(cfg.snapshot_file))
    engine = ScheduleEngine(store, _engine_settings(cfg))
    start, end = parse_date(str(cfg.start_date)), parse_date(str(cfg.end_date))
    occurrences = engine.get_occurrences_for_range(cfg.user_id, start, end)
    logger.info(
        f"Found {len(occurrences)} occurrences for user {cfg.user_id} "
        f"between {format_date(start)} and {format_date(end)}"
    )

    window = list(iter_dates(start, end))
    conflicts = set()
    for day_index in range(len(window)):
        conflicts |= engine.detect_conflicts(day_index, window, occurrences)
    if conflicts:
        logger.warning(f"{len(conflicts)} occurrences overlap another occurrence")

    daily = [
        {
            "date": format_date(date),
            "hours": engine.daily_non_overlapping_hours(day),
            "sessions": engine.daily_session_count(day),
        }
        for date, day in group_by_date(occurrences).items()
    ]
    totals = period_totals(occurrences, view=cfg.view)
    slices = engine.canonicalize_categories(occurrences)
    summary = summarise_range(occurrences, start, end)
    logger.info(
        f"{summary.total_hours:.2f} hours booked, "
        f"{summary.average_per_day:.2f} hours per day on average"
    )
    report = {
        "user_id": cfg.user_id,
        "start_date": format_date(start),
        "end_date": format_date(end),
        "occurrences": [
            o.model_dump(mode="json", exclude={"source"}) for o in occurrences
        ],
        "conflicts": sorted(conflicts),
        "daily": daily,
        "periods": [total._asdict() for total in totals],
        "categories": [s._asdict() for s in slices],
        "total_hours": summary.total_hours,
        "highest_day_hours": summary.highest_day_hours,
        "average_per_day": summary.average_per_day,
        "hourly_distribution": hourly_distribution(occurrences),
        "recurring_tasks": [
            {**stats._asdict(), "start": format_date(start), "end": format_date(end)}
            for stats in engine.recurring_task_stats(cfg.user_id, start, end)
        ],
    }
    if cfg.show_tables:
        display_occurrences(occurrences, conflicts)
        display_period_totals(totals)
        display_categories(slices)

    output_dir = Path(cfg.output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    report_path = output_dir / f"{REPORT_FILE_STEM}.{cfg.report_format}"
    _REPORT_WRITERS[cfg.report_format](report, report_path)
    logger.info(f"Report written to {report_path}")
    return report


@hydra.main(
    config_name="report",
    config_path="pkg://dayledger.configs.endpoints",
)
def main(cfg: DictConfig):
    run_report(cfg)
