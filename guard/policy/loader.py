"""Load and validate the optional .direct/config.yml workspace configuration."""

import logging
from dataclasses import dataclass
from pathlib import Path

import yaml

from guard.models.policy import GuardConfig

logger = logging.getLogger(__name__)


DEFAULT_CONFIG_TEMPLATE = """\
# direct-guard workspace configuration

audit:
  log_full_commands: true       # Store both cmd and cmd_sanitized
  default_view: "sanitized"     # What the audit view shows by default

  # Custom PII patterns (applied after the built-in patterns)
  pii_patterns:
    # Example: internal project code (built-ins run first, and the phone
    # heuristic claims long digit runs, so match on letters where possible)
    # - pattern: "PRJ-[A-Z]{4}"
    #   replacement: "[PROJECT_CODE]"

# Environment variables the agent may read through read_env_var
allowed_env_vars:
  - R_HOME
  - PATH
  - LANG
  - TZ

# Blocked paths (in addition to the defaults such as ~/.ssh)
blocked_paths:
  # - "/custom/sensitive/dir"

# Extra dangerous-operation signatures (checked after the built-ins)
dangerous_patterns:
  # - id: "download.file"
  #   pattern: "download\\\\.file\\\\s*\\\\("

# Extra secret shapes redacted from output (applied after the built-ins)
secret_patterns:
  # - pattern: "ghp_[A-Za-z0-9]{36}"
  #   replacement: "ghp_[REDACTED]"
"""


class ConfigLoadError(Exception):
    pass


@dataclass(frozen=True)
class ConfigLoadResult:
    """Config plus the recoverable error that forced a fallback, if any."""

    config: GuardConfig
    error: str | None = None

    @property
    def degraded(self) -> bool:
        return self.error is not None


def load_config(path: str | Path) -> GuardConfig:
    """
    Load a YAML config file and validate it against the GuardConfig schema.
    Raises ConfigLoadError if the file cannot be loaded or is invalid.
    """
    path = Path(path)
    if not path.exists():
        raise ConfigLoadError(f"Config file not found: {path}")

    try:
        with open(path, encoding="utf-8") as f:
            raw = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigLoadError(f"YAML parse error in {path}: {e}") from e
    except OSError as e:
        raise ConfigLoadError(f"Cannot read {path}: {e}") from e

    if raw is None:
        return GuardConfig()
    if not isinstance(raw, dict):
        raise ConfigLoadError(f"Config file must be a YAML mapping, got: {type(raw)}")

    try:
        return GuardConfig.model_validate(raw)
    except Exception as e:
        raise ConfigLoadError(f"Config validation error in {path}: {e}") from e


def load_config_or_default(path: str | Path) -> ConfigLoadResult:
    """
    Load the workspace config, falling back to built-in defaults.
    A missing file is normal; a broken one is logged and ignored.
    """
    if not Path(path).exists():
        return ConfigLoadResult(config=GuardConfig())
    try:
        return ConfigLoadResult(config=load_config(path))
    except ConfigLoadError as e:
        logger.warning("Ignoring workspace config, using built-in defaults: %s", e)
        return ConfigLoadResult(config=GuardConfig(), error=str(e))


def init_config(config_path: str | Path) -> bool:
    """Write the commented default config. Returns False if one already exists."""
    config_path = Path(config_path)
    if config_path.exists():
        logger.info("Config already exists at %s", config_path)
        return False
    config_path.parent.mkdir(parents=True, exist_ok=True)
    config_path.write_text(DEFAULT_CONFIG_TEMPLATE, encoding="utf-8")
    logger.info("Created workspace config at %s", config_path)
    return True
