"""Network configuration constants for the learner API."""

DEFAULT_HOST: str = "0.0.0.0"
DEFAULT_PORT: int = 8000
