from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict

from fund_core.models import MAX_PLATFORM_FEE_RATE, MAX_SUCCESS_FEE_RATE


class FundSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="FUND_",
        env_file=(".env", ".env.local"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Storage
    store_path: str = "fund.json"

    # Fee bounds, parts per 10000
    max_success_fee: int = MAX_SUCCESS_FEE_RATE
    max_platform_fee: int = MAX_PLATFORM_FEE_RATE
    default_success_fee: int = 2000
    default_platform_fee: int = 1000

    # Logging
    log_level: str = "INFO"
    log_format: str = "text"


@lru_cache()
def get_settings() -> FundSettings:
    return FundSettings()
