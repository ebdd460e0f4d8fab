#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
import logging
from pathlib import Path

from omegaconf import OmegaConf

logger = logging.getLogger(__name__)


def _suffix(debug: bool = False) -> str | None:
    return "debug" if debug else None


def create_dir(pth: Path | str, suffix: str | None = None):
    if suffix is not None:
        pth = f"{str(pth)}_{suffix}"
    if isinstance(pth, str):
        pth = Path(pth)

    if not pth.exists():
        pth.mkdir(parents=True)

    return str(pth)


OmegaConf.register_new_resolver(
    "create_dir", lambda pth, suffix=None: create_dir(pth, suffix), replace=True
)
OmegaConf.register_new_resolver(
    "set_suffix", lambda debug: _suffix(debug), replace=True
)
