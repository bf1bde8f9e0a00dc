"""Environment-driven settings for the media catalog."""

import os
import sys
from pathlib import Path
from typing import Optional

from loguru import logger
from pydantic import BaseModel, Field

DEFAULT_CATALOG_URL = "http://www.kh-song.com/app/webroot/img/upload.ajax/"


class CatalogSettings(BaseModel):
    url: str = Field(DEFAULT_CATALOG_URL, description="Remote catalog endpoint")
    timeout: float = Field(30.0, gt=0, description="HTTP timeout for the catalog fetch, seconds")
    assets_dir: Optional[Path] = Field(None, description="Read data.json from here instead of the network")
    load_timeout: float = Field(60.0, gt=0, description="How long API callers wait for the catalog")
    log_level: str = Field("INFO", description="loguru level for the stderr sink")
    port: int = Field(8888, ge=1, le=65535, description="HTTP API port")

    @classmethod
    def from_env(cls) -> "CatalogSettings":
        """Build settings from CATALOG_* environment variables."""
        values: dict = {}
        env_map = {
            "CATALOG_URL": "url",
            "CATALOG_TIMEOUT": "timeout",
            "CATALOG_ASSETS_DIR": "assets_dir",
            "CATALOG_LOAD_TIMEOUT": "load_timeout",
            "CATALOG_LOG_LEVEL": "log_level",
            "CATALOG_PORT": "port",
        }
        for env_name, field_name in env_map.items():
            raw = os.environ.get(env_name)
            if raw:
                values[field_name] = raw
        return cls(**values)


def configure_logging(level: str = "INFO") -> None:
    """Replace loguru's default sink with a stderr sink at ``level``."""
    logger.remove()
    logger.add(sys.stderr, level=level.upper())
