#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
MINUTES_PER_DAY = 1440
DEFAULT_SLOT_WIDTH_MINUTES = 30
DEFAULT_SLOT_STEP_MINUTES = 15
INSTANCE_ID_SEPARATOR = "_"
UNTITLED_CATEGORY = "Untitled"
# substring merges of category keys shorter than this need an explicit word break
MIN_MERGE_KEY_LENGTH = 3
# an alternate title this much shorter than the most frequent one becomes the base name
BASE_NAME_MIN_SHORTENING = 3
BASE_NAME_MIN_COUNT = 2
SIMILARITY_THRESHOLD = 0.6
MAX_SIMILAR_RESULTS = 5
LIGHT_PALETTE = (
    "#a5c4dd",
    "#a7d3b2",
    "#e2c897",
    "#e7b8a2",
    "#d6a7a7",
    "#c0add9",
    "#bfa8b6",
    "#a7c9c2",
    "#d3b8a7",
    "#a7b2d3",
    "#b0b8c2",
    "#c2d3a7",
)
DARK_PALETTE = (
    "#2f4a6d",
    "#2f5d47",
    "#6e5125",
    "#6e3c25",
    "#652b2b",
    "#46356e",
    "#5e3447",
    "#333b47",
    "#275550",
    "#5c4326",
    "#3e2f5c",
    "#2f3a5c",
)
REPORT_FILE_STEM = "report"
