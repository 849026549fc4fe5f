"""Study timer constants"""

TICK_INTERVAL_MS = 1000

DEFAULT_WORK_MINUTES = 25
DEFAULT_SHORT_BREAK_MINUTES = 5
DEFAULT_LONG_BREAK_MINUTES = 15

# Inclusive (min, max) bounds in minutes, matching the settings form
WORK_MINUTES_RANGE = (1, 60)
SHORT_BREAK_MINUTES_RANGE = (1, 30)
LONG_BREAK_MINUTES_RANGE = (5, 60)

# Every Nth naturally completed work session is followed by a long break
SESSIONS_BEFORE_LONG_BREAK = 4

SESSION_TYPE_POMODORO = "pomodoro"
NOTIFICATION_TITLE = "StudyHub Timer"
DOCUMENT_TITLE_SUFFIX = "StudyHub Timer"
