import os
from dataclasses import dataclass, field
from typing import Tuple

from board import BOARD_SIZE
from turn_timer import TURN_TIME_LIMIT


def _timeouts_from_env(raw: str) -> Tuple[float, ...]:
    values = tuple(float(part) for part in raw.split(",") if part.strip())
    return values or (3.0, 4.0, 5.0)


@dataclass
class GameConfig:
    """Runtime settings, read from the environment (and .env via app.py)."""

    board_size: int = BOARD_SIZE
    turn_time_limit: int = TURN_TIME_LIMIT
    ai_aggression: float = 1.2
    ai_random_bias: float = 0.5
    counter_api_url: str = "https://api.counterapi.dev/v1/wall-go-v1/matches"
    counter_local_file: str = ".match_count.json"
    counter_timeouts: Tuple[float, ...] = field(default=(3.0, 4.0, 5.0))
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "GameConfig":
        return cls(
            board_size=max(2, int(os.getenv("BOARD_SIZE", str(BOARD_SIZE)))),
            turn_time_limit=max(1, int(os.getenv("TURN_TIME_LIMIT", str(TURN_TIME_LIMIT)))),
            ai_aggression=float(os.getenv("AI_AGGRESSION", "1.2")),
            ai_random_bias=float(os.getenv("AI_RANDOM_BIAS", "0.5")),
            counter_api_url=os.getenv(
                "COUNTER_API_URL", "https://api.counterapi.dev/v1/wall-go-v1/matches"
            ),
            counter_local_file=os.getenv("COUNTER_LOCAL_FILE", ".match_count.json"),
            counter_timeouts=_timeouts_from_env(os.getenv("COUNTER_TIMEOUTS", "3,4,5")),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )
