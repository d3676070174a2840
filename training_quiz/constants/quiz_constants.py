"""Quiz-related constants shared across UI, API and core layers."""

PASS_THRESHOLD_PERCENT: float = 80.0
DEFAULT_TIME_LIMIT_SECONDS: int = 300
TICK_INTERVAL_MS: int = 1000
TIME_LIMIT_TICKING_WINDOW_SECONDS: int = 10
QUIZ_RESOURCE_TYPE: str = "quiz"
COMPLETED_STATUS: str = "completed"
