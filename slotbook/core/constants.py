"""Application-wide constants for the slotbook engine."""

from __future__ import annotations

# Wire format for slot and booking datetimes
DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S"
DATETIME_FORMAT_HINT = "YYYY-MM-DD HH:MM:SS"

# Accepted input layouts for a requested booking start, tried in order
ACCEPTED_DATETIME_FORMATS = (
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d %H:%M",
    "%Y-%m-%dT%H:%M:%S",
    "%Y-%m-%dT%H:%M",
)

# Working hours wire format: "HH:MM-HH:MM"
WORKING_HOURS_PATTERN = r"^(\d{2}):(\d{2})-(\d{2}):(\d{2})$"

# Service duration constraints
MIN_SERVICE_DURATION = 1  # minutes
MAX_SERVICE_DURATION = 480  # minutes (8 hours)

# Name constraints shared by providers and services
MIN_NAME_LENGTH = 2
MAX_NAME_LENGTH = 255
