"""Constants for the HomeKeeper integration."""

from typing import Final

DOMAIN: Final = "homekeeper"

CONF_URL: Final = "url"
CONF_API_KEY: Final = "api_key"
CONF_HOME_ID: Final = "home_id"

DEFAULT_UPDATE_INTERVAL_SECONDS: Final = 300  # 5 minutes
REFRESH_COOLDOWN_SECONDS: Final = 2.0

UPCOMING_LOOKAHEAD_DAYS: Final = 30

TASK_UID_PREFIX: Final = "task_"
TASK_TITLE_PREFIX: Final = "Task: "
TASK_START_HOUR: Final = 9
DEFAULT_EVENT_DURATION_MINUTES: Final = 60
