"""Configuration management for entry derivation."""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from spiffe_entry.domain.errors import InvalidSPIFFEIDError
from spiffe_entry.domain.value_objects.identifiers import TrustDomain


class ClusterConfig(BaseModel):
    """Cluster identity configuration."""

    trust_domain: str = Field(default="example.org")
    cluster_name: str = Field(default="cluster")
    cluster_domain: str = Field(default="")
    ignore_namespaces: list[str] = Field(
        default_factory=lambda: ["kube-system", "kube-public", "spire-system"]
    )

    @field_validator("trust_domain")
    @classmethod
    def _validate_trust_domain(cls, value: str) -> str:
        try:
            return TrustDomain.parse(value).name
        except InvalidSPIFFEIDError as e:
            raise ValueError(e.message) from e

    @field_validator("cluster_name")
    @classmethod
    def _validate_cluster_name(cls, value: str) -> str:
        if not value:
            raise ValueError("cluster name cannot be empty")
        return value

    def parsed_trust_domain(self) -> TrustDomain:
        return TrustDomain(self.trust_domain)


class ServerConfig(BaseModel):
    """Server configuration."""

    host: str = Field(default="0.0.0.0")
    metrics_port: int = Field(default=8082)


class ObservabilityConfig(BaseModel):
    """Observability configuration."""

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(default="INFO")
    log_format: Literal["json", "console"] = Field(default="json")
    otel_endpoint: str | None = Field(default=None)
    otel_service_name: str = Field(default="spiffe_entry")


class Config(BaseSettings):
    """Main configuration."""

    model_config = SettingsConfigDict(
        env_prefix="SPIFFE_ENTRY_",
        env_nested_delimiter="__",
    )

    cluster: ClusterConfig = Field(default_factory=ClusterConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)


@lru_cache
def get_config() -> Config:
    """Get the global configuration."""
    return Config()
