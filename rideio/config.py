#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Package settings, read from ``RIDEIO_*`` environment variables (or a
``.env`` file). Functions take explicit keyword overrides; these are only
the defaults.

"""
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix='RIDEIO_', env_file='.env', env_file_encoding='utf-8',
        extra='ignore')

    max_fit_records: int = 50000
    default_rider_mass_kg: float = 75.0
    store_batch_size: int = 100
    log_level: str = 'WARNING'


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings():
    """Forget the cached settings (they are re-read on next access)."""
    global _settings
    _settings = None
