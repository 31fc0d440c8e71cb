import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv


@dataclass(frozen=True)
class Settings:
    # OpenAI
    openai_api_key: Optional[str]
    openai_base_url: Optional[str]

    # Google Ads client config (google-ads.yaml)
    google_ads_config: str

    log_level: str


def get_settings() -> Settings:
    load_dotenv()  # reads .env if present

    return Settings(
        openai_api_key=os.getenv("OPENAI_API_KEY") or None,
        openai_base_url=os.getenv("OPENAI_BASE_URL") or None,
        google_ads_config=os.getenv("GOOGLE_ADS_CONFIG", "google-ads.yaml"),
        log_level=os.getenv("HARVESTER_LOG_LEVEL", "INFO").strip().upper(),
    )
