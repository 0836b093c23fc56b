"""How long chart samples are kept and how often stale ones are purged."""
from typing import Any, Mapping


class RetentionPolicy:
    def __init__(self, window_length: float = 3600.0, cleanup_interval: float = 300.0):
        self.window_length = float(window_length)
        self.cleanup_interval = float(cleanup_interval)
        if self.window_length <= 0 or self.cleanup_interval <= 0:
            raise ValueError("Retention durations must be positive")
        # Otherwise charts hold samples past the window between two passes
        if self.cleanup_interval >= self.window_length:
            raise ValueError(
                f"cleanup_interval ({self.cleanup_interval}s) must be shorter than "
                f"window_length ({self.window_length}s)"
            )

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> "RetentionPolicy":
        return cls(
            window_length=config.get("WINDOW_LENGTH", 3600),
            cleanup_interval=config.get("CLEANUP_INTERVAL", 300),
        )

    def cutoff(self, now: float) -> float:
        """Oldest timestamp still inside the window ending at `now`."""
        return now - self.window_length

    def __repr__(self) -> str:
        return (
            f"RetentionPolicy(window_length={self.window_length}, "
            f"cleanup_interval={self.cleanup_interval})"
        )
