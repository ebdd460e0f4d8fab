#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
import json
import logging
from pathlib import Path
from typing import Any

import nestedtext as nt

logger = logging.getLogger(__name__)


class UnsupportedFormatError(Exception):
    pass


def load_json(path: str | Path):
    with open(path, "r") as f:
        data = json.load(f)
    return data


def load_nestedtext(opath: Path | str) -> Any:
    """Read the context of a NestedText file."""
    with open(opath, "r") as f:
        data = nt.load(f, top="any")
    return data


_LOADER_MAP = {".json": load_json, ".nt": load_nestedtext}


def load_snapshot(path: str | Path) -> dict[str, list[dict[str, Any]]]:
    """Load an export of the task storage, in JSON or NestedText format.

    NestedText has no scalar types other than strings, so empty strings in a
    `.nt` snapshot stand for missing values and booleans are spelled `true`
    or `false`.
    """
    path = Path(path)
    try:
        loader = _LOADER_MAP[path.suffix]
    except KeyError:
        raise UnsupportedFormatError(
            f"Cannot load snapshot {path}, expected one of {tuple(_LOADER_MAP)}"
        )
    data = loader(path)
    if not isinstance(data, dict):
        raise UnsupportedFormatError(
            f"Snapshot {path} should map table names to lists of records"
        )
    logger.info(f"Loaded snapshot {path} with tables {list(data)}")
    return data
