#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
DateStr = str
"""A calendar date formatted as YYYY-MM-DD."""
TimeStr = str
"""A wall-clock time of the day formatted as HH:MM (24-hour)."""
TemplateId = str
OccurrenceId = str
"""Equal to the template id for one-off tasks and `<template id>_<YYYY-MM-DD>`
for instances of recurring tasks."""
UserId = str
Minutes = int
"""Minutes since midnight."""
