"""Unit tests for entry derivation configuration."""

import pytest
from pydantic import ValidationError

from spiffe_entry.infrastructure.config import (
    ClusterConfig,
    Config,
    ObservabilityConfig,
    ServerConfig,
)


@pytest.mark.unit
class TestClusterConfig:
    """Tests for ClusterConfig."""

    def test_default_values(self):
        config = ClusterConfig()
        assert config.trust_domain == "example.org"
        assert config.cluster_domain == ""
        assert "kube-system" in config.ignore_namespaces

    def test_trust_domain_accepts_spiffe_form(self):
        config = ClusterConfig(trust_domain="spiffe://corp.example")
        assert config.trust_domain == "corp.example"
        assert str(config.parsed_trust_domain()) == "corp.example"

    @pytest.mark.parametrize("value", ["Not Valid", "example.org\n", "spiffe://example.org\n"])
    def test_invalid_trust_domain(self, value):
        with pytest.raises(ValidationError, match="trust domain characters"):
            ClusterConfig(trust_domain=value)

    def test_empty_cluster_name(self):
        with pytest.raises(ValidationError, match="cluster name cannot be empty"):
            ClusterConfig(cluster_name="")


@pytest.mark.unit
class TestObservabilityConfig:
    """Tests for ObservabilityConfig."""

    def test_default_values(self):
        config = ObservabilityConfig()
        assert config.log_level == "INFO"
        assert config.log_format == "json"
        assert config.otel_endpoint is None

    def test_invalid_log_level(self):
        with pytest.raises(ValidationError):
            ObservabilityConfig(log_level="TRACE")


@pytest.mark.unit
class TestConfig:
    """Tests for the main Config."""

    def test_defaults(self):
        config = Config()
        assert isinstance(config.cluster, ClusterConfig)
        assert isinstance(config.server, ServerConfig)
        assert config.server.metrics_port == 8082

    def test_env_override(self, monkeypatch: pytest.MonkeyPatch):
        """Test nested settings are read from the environment."""
        monkeypatch.setenv("SPIFFE_ENTRY_CLUSTER__TRUST_DOMAIN", "corp.example")
        monkeypatch.setenv("SPIFFE_ENTRY_CLUSTER__CLUSTER_NAME", "prod")
        monkeypatch.setenv("SPIFFE_ENTRY_OBSERVABILITY__LOG_FORMAT", "console")

        config = Config()
        assert config.cluster.trust_domain == "corp.example"
        assert config.cluster.cluster_name == "prod"
        assert config.observability.log_format == "console"
