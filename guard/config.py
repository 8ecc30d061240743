from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Application
    environment: Literal["dev", "staging", "prod"] = "dev"
    log_level: str = "INFO"

    # Workspace (the root is resolved once when the Workspace is built)
    workspace_root: str = "."
    audit_dir_name: str = ".direct"
    audit_log_name: str = "audit.log"
    config_file_name: str = "config.yml"

    # Console bridge (receives approved code for execution)
    console_url: str = "http://127.0.0.1:8765"
    console_timeout_seconds: float = 30.0

    # Security
    admin_api_key: str = ""  # required for audit endpoints


settings = Settings()
