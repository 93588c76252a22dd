# File: const.py
"""Constants for the ChorePlanner scheduling engine.

This file centralizes data keys, recurrence types, tuning defaults, and
error message formats so that every engine reads the same values.
"""

import logging

# ------------------------------------------------------------------------------------------------
# General / Package Information
# ------------------------------------------------------------------------------------------------
# Logger
LOGGER = logging.getLogger(__package__)

# Default time zone used to bind HH:MM windows to a date
DEFAULT_TIME_ZONE_NAME = "UTC"

# ------------------------------------------------------------------------------------------------
# Scheduling Context Keys
# ------------------------------------------------------------------------------------------------
CONTEXT_WEEK_START = "week_start"
CONTEXT_TASKS = "tasks"
CONTEXT_MEMBERS = "members"
CONTEXT_CALENDAR_EVENTS = "calendar_events"
CONTEXT_FAIRNESS_HISTORY = "fairness_history"

# ------------------------------------------------------------------------------------------------
# Task Definition Keys
# ------------------------------------------------------------------------------------------------
DATA_TASK_ID = "task_id"
DATA_TASK_HOUSEHOLD_ID = "household_id"
DATA_TASK_NAME = "name"
DATA_TASK_DESCRIPTION = "description"
DATA_TASK_CATEGORY = "category"
DATA_TASK_DURATION_MIN = "duration_min"
DATA_TASK_FREQUENCY = "frequency"
DATA_TASK_TIME_WINDOWS = "time_windows"
DATA_TASK_CONSTRAINTS = "constraints"
DATA_TASK_FAIRNESS_WEIGHT = "fairness_weight"
DATA_TASK_ROTATION_ROSTER = "rotation_roster"
DATA_TASK_ACTIVE = "active"

# Frequency (recurrence rule) keys
DATA_FREQUENCY_TYPE = "type"
DATA_FREQUENCY_BY_WEEKDAY = "byWeekday"
DATA_FREQUENCY_BY_MONTH_DAY = "byMonthDay"
DATA_FREQUENCY_CRON = "cron"

# Time window keys
DATA_WINDOW_START = "start"
DATA_WINDOW_END = "end"

# Constraint keys
DATA_CONSTRAINT_ADULTS_ONLY = "adultsOnly"
DATA_CONSTRAINT_REQUIRED_CAPABILITIES = "requiredCapabilities"
DATA_CONSTRAINT_EXCLUDE_ALLERGIES = "excludeAllergies"
DATA_CONSTRAINT_MINIMUM_AGE = "minimumAge"

# ------------------------------------------------------------------------------------------------
# Member Keys
# ------------------------------------------------------------------------------------------------
DATA_MEMBER_ID = "id"
DATA_MEMBER_HOUSEHOLD_ID = "household_id"
DATA_MEMBER_USER_ID = "user_id"
DATA_MEMBER_ROLE = "role"
DATA_MEMBER_CAPABILITIES = "capabilities"
DATA_MEMBER_ALLERGIES = "allergies"
DATA_MEMBER_AGE = "age"

# ------------------------------------------------------------------------------------------------
# Calendar Event Keys
# ------------------------------------------------------------------------------------------------
DATA_EVENT_ID = "id"
DATA_EVENT_START = "start"
DATA_EVENT_END = "end"
DATA_EVENT_BUSY = "busy"
DATA_EVENT_ALL_DAY = "all_day"

# ------------------------------------------------------------------------------------------------
# Fairness History Record Keys
# ------------------------------------------------------------------------------------------------
DATA_HISTORY_USER_ID = "user_id"
DATA_HISTORY_WEEK_START = "week_start"
DATA_HISTORY_STATUS = "status"
DATA_HISTORY_DURATION_MIN = "duration_min"
DATA_HISTORY_FAIRNESS_WEIGHT = "fairness_weight"
DATA_HISTORY_PLAN_STATUS = "plan_status"

ASSIGNMENT_STATUS_PENDING = "pending"
ASSIGNMENT_STATUS_DONE = "done"

# Only published plans feed fairness history
PLAN_STATUS_PUBLISHED = "published"

DEFAULT_FAIRNESS_HISTORY_WEEKS = 4

# ------------------------------------------------------------------------------------------------
# Recurrence Types
# ------------------------------------------------------------------------------------------------
FREQUENCY_DAILY = "daily"
FREQUENCY_WEEKLY = "weekly"
FREQUENCY_MONTHLY = "monthly"
FREQUENCY_CUSTOM = "custom"

# Types the occurrence engine can expand (custom/cron is rejected)
SUPPORTED_FREQUENCIES = (
    FREQUENCY_DAILY,
    FREQUENCY_WEEKLY,
    FREQUENCY_MONTHLY,
)

# Weekday numbering used by task definitions: 0=Sunday .. 6=Saturday
WEEKDAY_SUNDAY = 0
WEEKDAY_SATURDAY = 6

# Python weekday() of the required week start (Monday)
WEEK_START_WEEKDAY = 0
DAYS_PER_WEEK = 7

# ------------------------------------------------------------------------------------------------
# Engine Option Keys
# ------------------------------------------------------------------------------------------------
OPTION_BUFFER_MINUTES = "buffer_minutes"
OPTION_SLOT_STRIDE_MINUTES = "slot_stride_minutes"
OPTION_FAIRNESS_COST_WEIGHT = "fairness_cost_weight"
OPTION_OFF_WINDOW_PENALTY = "off_window_penalty"
OPTION_TIME_ZONE = "time_zone"

# ------------------------------------------------------------------------------------------------
# Scheduling Defaults
# ------------------------------------------------------------------------------------------------
# Minutes kept free on both sides of every busy period
DEFAULT_BUFFER_MINUTES = 15

# Candidate start times are tried at this stride inside each window
DEFAULT_SLOT_STRIDE_MINUTES = 15

# Cost contribution per point of fairness score
FAIRNESS_COST_WEIGHT = 10

# Flat cost when a slot is not fully inside a preferred window
OFF_WINDOW_PENALTY = 50

# Window used when a task definition carries no time windows
ALL_DAY_WINDOW_START = "00:00"
ALL_DAY_WINDOW_END = "23:59"

# Capability required by adultsOnly tasks
CAPABILITY_ADULT_ONLY = "adult_only"

# Task priority terms
PRIORITY_WINDOW_BASELINE = 100
PRIORITY_FAIRNESS_FACTOR = 20
PRIORITY_DURATION_DIVISOR = 10

# ------------------------------------------------------------------------------------------------
# Validation Limits
# ------------------------------------------------------------------------------------------------
MIN_TASK_DURATION_MIN = 1
MIN_FAIRNESS_WEIGHT = 0
DEFAULT_FAIRNESS_WEIGHT = 1
MIN_MONTH_DAY = 1
MAX_MONTH_DAY = 31
MAX_MEMBER_AGE = 150

# HH:MM with 0-23 hours and 0-59 minutes ("7:05" allowed)
TIME_OF_DAY_PATTERN = r"^([01]?[0-9]|2[0-3]):[0-5][0-9]$"

# ------------------------------------------------------------------------------------------------
# Messages
# ------------------------------------------------------------------------------------------------
CONFLICT_NO_SLOT_FMT = 'No available slot found for task "{name}" on {date}'

ERROR_UNSUPPORTED_FREQUENCY_FMT = (
    "Task '{name}' uses unsupported recurrence type '{frequency}'"
)
ERROR_INVALID_DURATION_FMT = (
    "Task '{name}' has invalid duration {duration} (must be a positive integer)"
)
ERROR_INVALID_WINDOW_FMT = (
    "Task '{name}' has invalid time window {start}-{end} (end must follow start)"
)
ERROR_WEEK_START_NOT_MONDAY_FMT = "week_start {week_start} is not a Monday"
ERROR_NO_MEMBERS_FMT = "Household has {count} active task(s) but no members"
ERROR_DUPLICATE_MEMBER_FMT = "Member id '{member_id}' appears more than once"
ERROR_INVALID_CONTEXT_FMT = "Invalid scheduling context: {error}"
ERROR_INVALID_OPTIONS_FMT = "Invalid engine options: {error}"
ERROR_UNKNOWN_TIME_ZONE_FMT = "Unknown time zone '{time_zone}'"
