"""Constants for todokit.

This module centralizes the sentinels and reserved tag names used throughout the library.
"""

# Priorities: 0..25 map to A..Z
NO_PRIORITY = 26

# Returned by add() when no task was created
INVALID_ID = 9_999_999_999

# Date range bound meaning "also match tasks without the date"
INCLUDE_NONE = -9_999_999

# Reserved tags
DUE_TAG = "due"
THR_TAG = "t"
REC_TAG = "rec"
UNTIL_TAG = "until"
PRI_TAG = "pri"
TIMER_TAG = "tmr"
SPENT_TAG = "spent"
TIMER_OFF = "off"

# Tags whose values are dates and get rewritten to canonical form
DATE_TAGS = (DUE_TAG, THR_TAG, UNTIL_TAG)

DEFAULT_SOON_DAYS = 7

# Suffix appended to the list path while saving
TEMP_FILE_SUFFIX = ".todo.tmp"
