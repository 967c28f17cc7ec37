"""
Ledger configuration management.

This module handles loading and accessing ledger configuration from multiple
sources with a clear priority order:

    1. Environment variables (highest priority) - for containerized deployments
    2. Config file (config/ledger.ini) - for static deployments
    3. Built-in defaults (lowest priority) - sensible fallbacks

Configuration is loaded once at module import time and cached. The LedgerConfig
dataclass provides typed access to all settings.

Usage:
    from proof_ledger.config import get_config

    cfg = get_config()
    print(cfg.ledger.difficulty)
    print(cfg.logging.level)

Environment Variable Mapping:
    LEDGER_DIFFICULTY        -> ledger.difficulty
    LEDGER_MAX_ATTEMPTS      -> ledger.max_attempts
    LEDGER_GENESIS_PAYLOAD   -> ledger.genesis_payload
    LEDGER_LOG_LEVEL         -> logging.level
"""

import configparser
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal

from proof_ledger.ledger.record import DEFAULT_DIFFICULTY, GENESIS_PAYLOAD

# =============================================================================
# PATH CONFIGURATION
# =============================================================================

# Project root directory (contains src/, config/)
PROJECT_ROOT = Path(__file__).parent.parent.parent

# Config file paths
CONFIG_DIR = PROJECT_ROOT / "config"
CONFIG_FILE = CONFIG_DIR / "ledger.ini"
CONFIG_EXAMPLE = CONFIG_DIR / "ledger.example.ini"

_LOG_FORMATS = {
    "simple": "%(levelname)s: %(message)s",
    "detailed": "%(asctime)s %(levelname)s [%(name)s] %(message)s",
}


# =============================================================================
# CONFIGURATION DATACLASSES
# =============================================================================


@dataclass
class LedgerSettings:
    """Sealing and genesis configuration."""

    difficulty: int = DEFAULT_DIFFICULTY
    max_attempts: int = 0  # 0 = unbounded search
    genesis_payload: str = GENESIS_PAYLOAD

    @property
    def max_attempts_or_none(self) -> int | None:
        """Sealing bound as passed to the ledger (``None`` when unbounded)."""
        return self.max_attempts if self.max_attempts > 0 else None


@dataclass
class LoggingSettings:
    """Logging configuration."""

    level: str = "INFO"
    format: Literal["simple", "detailed"] = "detailed"


@dataclass
class LedgerConfig:
    """
    Complete ledger configuration.

    Aggregates all settings sections. Access the current instance via
    `get_config()`.
    """

    ledger: LedgerSettings = field(default_factory=LedgerSettings)
    logging: LoggingSettings = field(default_factory=LoggingSettings)


# =============================================================================
# CONFIGURATION LOADING
# =============================================================================


def _parse_int(name: str, value: str) -> int:
    """Parse an integer setting, naming the setting on failure."""
    try:
        return int(value)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {value!r}.") from exc


def _load_from_ini(parser: configparser.ConfigParser, cfg: LedgerConfig) -> None:
    """Load configuration from parsed INI file into LedgerConfig."""
    # Ledger section
    if parser.has_section("ledger"):
        if parser.has_option("ledger", "difficulty"):
            cfg.ledger.difficulty = parser.getint("ledger", "difficulty")
        if parser.has_option("ledger", "max_attempts"):
            cfg.ledger.max_attempts = parser.getint("ledger", "max_attempts")
        if parser.has_option("ledger", "genesis_payload"):
            cfg.ledger.genesis_payload = parser.get("ledger", "genesis_payload")

    # Logging section
    if parser.has_section("logging"):
        if parser.has_option("logging", "level"):
            cfg.logging.level = parser.get("logging", "level").upper()
        if parser.has_option("logging", "format"):
            val = parser.get("logging", "format").lower()
            if val in ("simple", "detailed"):
                cfg.logging.format = val  # type: ignore[assignment]


def _apply_env_overrides(cfg: LedgerConfig) -> None:
    """Apply environment variable overrides to configuration."""
    if env_difficulty := os.getenv("LEDGER_DIFFICULTY"):
        cfg.ledger.difficulty = _parse_int("LEDGER_DIFFICULTY", env_difficulty)
    if env_attempts := os.getenv("LEDGER_MAX_ATTEMPTS"):
        cfg.ledger.max_attempts = _parse_int("LEDGER_MAX_ATTEMPTS", env_attempts)
    if env_genesis := os.getenv("LEDGER_GENESIS_PAYLOAD"):
        cfg.ledger.genesis_payload = env_genesis

    if env_log := os.getenv("LEDGER_LOG_LEVEL"):
        cfg.logging.level = env_log.upper()


def load_config() -> LedgerConfig:
    """
    Load configuration from all sources with proper priority.

    Priority (highest wins):
        1. Environment variables
        2. config/ledger.ini
        3. config/ledger.example.ini (fallback for development)
        4. Built-in defaults

    Returns:
        LedgerConfig: Fully populated configuration object.
    """
    cfg = LedgerConfig()

    config_file = None
    if CONFIG_FILE.exists():
        config_file = CONFIG_FILE
    elif CONFIG_EXAMPLE.exists():
        config_file = CONFIG_EXAMPLE

    if config_file:
        parser = configparser.ConfigParser()
        parser.read(config_file)
        _load_from_ini(parser, cfg)

    # Environment wins over any file
    _apply_env_overrides(cfg)

    return cfg


def reload_config() -> LedgerConfig:
    """
    Reload configuration from disk and environment.

    This replaces the module-level `config` singleton. Ledgers already
    constructed keep the difficulty they were created with.

    Returns:
        LedgerConfig: The newly loaded configuration.
    """
    global config
    config = load_config()
    return config


def get_config() -> LedgerConfig:
    """Return the current configuration singleton (honours `reload_config()`)."""
    return config


# =============================================================================
# MODULE-LEVEL SINGLETON
# =============================================================================

config = load_config()


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================


def configure_logging(cfg: LedgerConfig | None = None) -> None:
    """
    Configure the root logger from the logging settings.

    Only the CLI calls this; importing the library never touches logging
    handlers.
    """
    cfg = cfg or config
    logging.basicConfig(
        level=getattr(logging, cfg.logging.level, logging.INFO),
        format=_LOG_FORMATS[cfg.logging.format],
    )


def get_config_status() -> dict:
    """
    Get configuration status for diagnostics.

    Returns a dictionary with configuration source information.
    """
    return {
        "config_file_exists": CONFIG_FILE.exists(),
        "config_file_path": str(CONFIG_FILE),
        "using_example": not CONFIG_FILE.exists() and CONFIG_EXAMPLE.exists(),
        "difficulty": config.ledger.difficulty,
        "max_attempts": config.ledger.max_attempts_or_none,
    }


def print_config_summary() -> None:
    """Print a summary of current configuration to stdout."""
    status = get_config_status()
    bound = status["max_attempts"] if status["max_attempts"] is not None else "unbounded"
    print("\n" + "=" * 60)
    print("LEDGER CONFIGURATION")
    print("=" * 60)
    print(f"Config file: {status['config_file_path']}")
    print(f"File exists: {status['config_file_exists']}")
    if status["using_example"]:
        print("NOTE: Using example config (copy to ledger.ini to customise)")
    print("-" * 60)
    print(f"Difficulty:   {config.ledger.difficulty}")
    print(f"Max attempts: {bound}")
    print(f"Genesis:      {config.ledger.genesis_payload}")
    print(f"Log level:    {config.logging.level}")
    print("=" * 60 + "\n")
