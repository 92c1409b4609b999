from __future__ import annotations
from pathlib import Path
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from .game import DEFAULT_CONFIG_TEMPLATE_URL

class Settings(BaseSettings):
    servers_root: Path = Field(default=Path("servers"), alias="DNL_SERVERS_ROOT")
    logs_dir: Path = Field(default=Path("logs"), alias="DNL_LOGS_DIR")

    config_template_url: str = Field(default=DEFAULT_CONFIG_TEMPLATE_URL, alias="DNL_CONFIG_TEMPLATE_URL")
    download_timeout: float = Field(default=30.0, alias="DNL_DOWNLOAD_TIMEOUT")
    stop_timeout: float = Field(default=10.0, alias="DNL_STOP_TIMEOUT")
    embed_console: bool = Field(default=False, alias="DNL_EMBED_CONSOLE")

    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_json: bool = Field(default=False, alias="LOG_JSON")

    model_config = SettingsConfigDict(extra="ignore", populate_by_name=True)

    def server_storage_root(self, server_id: str) -> Path:
        return self.servers_root / str(server_id) / "serverfiles"
