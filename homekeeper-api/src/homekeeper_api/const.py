"""Constants for the HomeKeeper client and scheduling engine."""

__version__ = "0.1.0"

REST_PATH = "/rest/v1"

HOMES_TABLE = "homes"
HOME_TASKS_TABLE = "home_tasks"
CALENDAR_EVENTS_TABLE = "calendar_events"

HEADER_API_KEY = "apikey"
HEADER_PREFER = "Prefer"
PREFER_RETURN_REPRESENTATION = "return=representation"

DEFAULT_REQUEST_TIMEOUT_SECONDS = 30

# Hard cap on loop iterations for a single expansion call.
MAX_OCCURRENCES = 100
DEFAULT_HORIZON_DAYS = 365

THIS_WEEK_DAYS = 7
THIS_MONTH_DAYS = 30

DASHBOARD_HORIZON_DAYS = 365

STATUS_COMPLETED = "completed"

DEFAULT_EVENT_COLOR = "blue"
FALLBACK_COLOR_HEX = "#6B7280"
SELECTED_ALPHA_SUFFIX = "40"

COLOR_HEX = {
    "red": "#DC2626",
    "blue": "#4F46E5",
    "green": "#10B981",
    "yellow": "#F59E0B",
    "purple": "#8B5CF6",
    "pink": "#DB2777",
}

PRIORITY_COLORS = {
    "urgent": "red",
    "high": "orange",
    "medium": "blue",
    "low": "green",
}
DEFAULT_TASK_COLOR = "gray"
