"""Configuration settings for the monitor."""

from dataclasses import dataclass, field
import os

from dotenv import load_dotenv


load_dotenv()


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None


@dataclass
class Settings:
    """Application settings."""

    fred_api_key: str = field(default_factory=lambda: os.getenv("FRED_API_KEY", ""))
    fred_graph_url: str = field(
        default_factory=lambda: os.getenv(
            "FRED_GRAPH_URL", "https://fred.stlouisfed.org/graph/fredgraph.csv"
        )
    )
    fred_api_url: str = field(
        default_factory=lambda: os.getenv(
            "FRED_API_URL", "https://api.stlouisfed.org/fred"
        )
    )
    request_timeout: float = field(
        default_factory=lambda: _env_float("FRED_REQUEST_TIMEOUT", 30.0)
    )
    # Randomized pause between sequential series requests (seconds)
    min_request_delay: float = field(
        default_factory=lambda: _env_float("FRED_MIN_DELAY", 0.6)
    )
    max_request_delay: float = field(
        default_factory=lambda: _env_float("FRED_MAX_DELAY", 1.5)
    )
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        """Validate settings."""
        if self.request_timeout <= 0:
            raise ValueError("request_timeout must be positive")
        if self.min_request_delay < 0 or self.max_request_delay < self.min_request_delay:
            raise ValueError(
                "Request delays must satisfy 0 <= min_request_delay <= max_request_delay"
            )

    def has_api_key(self) -> bool:
        """Check if a FRED API key is configured."""
        return bool(self.fred_api_key)
