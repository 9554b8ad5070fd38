from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache


_DATA_DIR_ENV = "FOOT_TRAFFIC_DATA_DIR"
_CONVERTED_DIR_ENV = "FOOT_TRAFFIC_CONVERTED_DIR"
_MERGED_PATH_ENV = "FOOT_TRAFFIC_MERGED_PATH"
_SOURCE_URL_ENV = "FOOT_TRAFFIC_SOURCE_URL"
_HTTP_TIMEOUT_ENV = "FOOT_TRAFFIC_HTTP_TIMEOUT"
_LOG_LEVEL_ENV = "LOG_LEVEL"

DEFAULT_SOURCE_URL = "http://uioomcomcall.jit.su/api/bydatecsv/"


@dataclass(frozen=True)
class Settings:
    data_dir: str
    converted_dir: str
    merged_path: str
    source_url: str
    http_timeout: float
    log_level: str


def _read_str_env(name: str, default: str) -> str:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or default


def _read_timeout(default: float) -> float:
    value = os.getenv(_HTTP_TIMEOUT_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = float(candidate)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _read_log_level(default: str) -> str:
    value = os.getenv(_LOG_LEVEL_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    return candidate.upper()


@lru_cache
def get_settings() -> Settings:
    return Settings(
        data_dir=_read_str_env(_DATA_DIR_ENV, "./output"),
        converted_dir=_read_str_env(_CONVERTED_DIR_ENV, "./convertedOutput"),
        merged_path=_read_str_env(_MERGED_PATH_ENV, "./merged.csv"),
        source_url=_read_str_env(_SOURCE_URL_ENV, DEFAULT_SOURCE_URL),
        http_timeout=_read_timeout(30.0),
        log_level=_read_log_level("INFO"),
    )
