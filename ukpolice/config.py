from __future__ import annotations
from typing import List, Optional
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_BASE_URL = "https://data.police.uk/api/"
DEFAULT_USER_AGENT = "go-ukpolice"
# data.police.uk: 15 requests/second sustained, bursts of up to 30
DEFAULT_RATE = 15.0
DEFAULT_BURST = 30


class Settings(BaseSettings):
    # ----------------
    # Upstream API
    # ----------------
    base_url: str = Field(DEFAULT_BASE_URL, alias="UKPOLICE_BASE_URL")
    user_agent: str = Field(DEFAULT_USER_AGENT, alias="UKPOLICE_USER_AGENT")
    timeout: Optional[float] = Field(None, alias="UKPOLICE_TIMEOUT")  # seconds; unset = no timeout

    # ----------------
    # Rate limiting
    # ----------------
    api_rps: float = Field(DEFAULT_RATE, alias="API_RPS")
    api_burst: int = Field(DEFAULT_BURST, alias="API_BURST")

    # ----------------
    # Caller-side retries (CLI only; the client itself never retries)
    # ----------------
    api_max_retries: int = Field(5, alias="API_MAX_RETRIES")
    api_backoff_base: float = Field(0.5, alias="API_BACKOFF_BASE")
    api_backoff_cap: float = Field(8.0, alias="API_BACKOFF_CAP")

    # ----------------
    # CLI job selection / parallelism
    # ----------------
    start_month: Optional[str] = Field(None, alias="START_MONTH")   # YYYY-MM, default: latest available
    forces_csv: str = Field(
        "metropolitan,west-midlands,city-of-london,avon-and-somerset",
        alias="FORCES"
    )
    max_workers: int = Field(4, alias="MAX_WORKERS")

    @property
    def forces(self) -> List[str]:
        return _split_csv(self.forces_csv)

    # ----------------
    # Logging / Metrics
    # ----------------
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    log_file: Optional[str] = Field(None, alias="LOG_FILE")
    metrics_port: Optional[int] = Field(None, alias="METRICS_PORT")

    # ----------------
    # Pydantic settings
    # ----------------
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

def _split_csv(s: str | None) -> List[str]:
    if not s:
        return []
    return [x.strip() for x in s.split(",") if x.strip()]

settings = Settings()
