"""
Harvester run configuration - pydantic model plus YAML loader.

Example (configs/harvester.yaml):

    customer_id: "737-284-4356"
    campaign_name_filter: "Brand"
    lookback_days: 7
    default_bid: 1.0
    model: "gpt-4o"
    temperature: 0
    max_output_tokens: 30
    report_db_path: "harvester_reports.duckdb"
"""
from __future__ import annotations

from pathlib import Path
from typing import Dict, Optional

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from .models import Language

DEFAULT_LABEL_PREFIX = "Converted_"
DEFAULT_LABEL_DESCRIPTION = "Keywords added automatically by AI script."


class HarvesterConfig(BaseModel):
    customer_id: str
    campaign_name_filter: str
    lookback_days: int = Field(default=7, ge=1)
    default_bid: float = Field(default=1.0, gt=0)

    # Oracle parameters
    model: str = "gpt-4o"
    temperature: float = Field(default=0.0, ge=0, le=2)
    max_output_tokens: int = Field(default=30, ge=1)

    # Campaign naming convention: language code -> marker expected in campaign names
    language_markers: Dict[str, str] = Field(default_factory=dict)

    label_prefix: str = DEFAULT_LABEL_PREFIX
    label_description: str = DEFAULT_LABEL_DESCRIPTION

    # None = report sink not configured
    report_db_path: Optional[str] = None

    @field_validator("customer_id", mode="before")
    @classmethod
    def customer_id_digits_only(cls, v) -> str:
        v2 = "".join(ch for ch in str(v) if ch.isdigit())
        if not v2:
            raise ValueError("customer_id must contain digits")
        return v2

    @field_validator("campaign_name_filter")
    @classmethod
    def filter_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("campaign_name_filter must not be empty")
        return v

    @model_validator(mode="after")
    def fill_language_markers(self) -> "HarvesterConfig":
        markers: Dict[str, str] = {}
        for lang in Language.specific():
            marker = self.language_markers.get(lang.value, lang.value)
            marker = str(marker).strip()
            if not marker:
                raise ValueError(f"language_markers.{lang.value} must not be empty")
            markers[lang.value] = marker
        unknown = set(self.language_markers) - set(markers)
        if unknown:
            raise ValueError(f"Unknown language_markers keys: {sorted(unknown)}")
        self.language_markers = markers
        return self


def parse_harvester_config(data: dict) -> HarvesterConfig:
    # Raises ValidationError if invalid
    return HarvesterConfig.model_validate(data)


def load_harvester_config(path: str | Path) -> HarvesterConfig:
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Harvester config not found: {p}")

    data = yaml.safe_load(p.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError("Harvester config must be a YAML mapping/object")

    return parse_harvester_config(data)
