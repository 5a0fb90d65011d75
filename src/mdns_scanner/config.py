"""Configuration management for the mDNS scanner."""

import json
from pathlib import Path
from typing import List, Literal, Optional

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class DiscoveryConfig(BaseModel): # Nested under Config (BaseSettings)
    """Configuration for mDNS discovery sessions and scan lifecycle."""

    query_interval_seconds: float = Field(default=5.0, ge=0.5, le=300, description="Interval at which a session re-sends its query for the service type.")
    session_lifetime_seconds: Optional[float] = Field(default=None, ge=1.0, description="If set, a scan replaces its discovery session with a fresh one after this many seconds. None listens on one session indefinitely.")
    cancel_timeout_seconds: float = Field(default=5.0, gt=0, le=60, description="Upper bound for a cancelled scan task to finish before it is reported as stuck.")
    response_queue_size: int = Field(default=256, ge=1, le=65536, description="Responses buffered between the network listener and the scan task; the oldest is dropped on overflow.")

    ip_version: Literal["all", "v4", "v6"] = Field(default="all", description="IP versions to listen on.")
    interfaces: List[str] = Field(default_factory=list, description="Interface addresses to bind (e.g., ['192.168.1.10']). If empty, all interfaces are used.")

class UIConfig(BaseModel):
    """Configuration for the terminal view."""

    tick_ms: int = Field(default=8, ge=1, le=1000, description="Input poll interval per render tick, in milliseconds.")
    not_found_placeholder: str = Field(default="Not found", description="Text shown for a host without an address of that family.")

    @property
    def tick_seconds(self) -> float:
        return self.tick_ms / 1000

class LoggingConfig(BaseModel):
    """Configuration for logging."""

    level: str = Field(default="WARNING", description="Log level")
    format: str = Field(default="console", description="Log format ('console' or 'json')")
    file: Optional[Path] = Field(default=None, description="Log file path. Keeps log output off the terminal UI.")


class Config(BaseSettings):
    """Main configuration for the mDNS scanner. Loads from environment variables prefixed with MDNS_SCANNER_."""

    model_config = SettingsConfigDict(
        env_prefix='MDNS_SCANNER_',
        env_nested_delimiter='__', # e.g., MDNS_SCANNER_DISCOVERY__QUERY_INTERVAL_SECONDS
        extra='ignore',
        env_file='.env',
        env_file_encoding='utf-8'
    )

    discovery: DiscoveryConfig = Field(default_factory=DiscoveryConfig)
    ui: UIConfig = Field(default_factory=UIConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def from_file(cls, file_path: Path) -> "Config":
        """Create configuration strictly from a JSON file.
        Environment variables are not layered on top.
        """
        with open(file_path) as f:
            config_data = json.load(f)
        return cls.model_validate(config_data)
