from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # API
    api_secret_key: str

    # Settings store
    database_url: str = "sqlite+aiosqlite:///./journal.db"

    # Account defaults (used until the user stores their own)
    default_starting_balance: float = 10000.0

    # Growth projection
    default_projection_days: int = 90
    max_projection_days: int = 365

    # Risk of ruin: fraction of the account risked on each trade
    risk_per_trade: float = 0.01

    # App
    log_level: str = "INFO"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}
