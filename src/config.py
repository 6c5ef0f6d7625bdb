import os
from dataclasses import dataclass


@dataclass(frozen=True)
class EngineConfig:
    """
    Tunables for the payments engine.
    A zero queue size means unbounded. The error channel is always unbounded.
    """

    command_queue_size: int = 100
    log_level: str = "WARNING"

    @classmethod
    def from_env(cls) -> "EngineConfig":
        """Build a config from PAYMENTS_* environment variables, falling back to defaults."""
        defaults = cls()
        return cls(
            command_queue_size=int(os.getenv("PAYMENTS_COMMAND_QUEUE_SIZE", defaults.command_queue_size)),
            log_level=os.getenv("PAYMENTS_LOG_LEVEL", defaults.log_level).upper(),
        )
