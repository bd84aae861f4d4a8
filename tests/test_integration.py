import pytest

from clusterlens.config import Config
from clusterlens.integration import IntegrationNotFoundError, IntegrationRegistry
from clusterlens.integrations.trivy import Trivy


@pytest.fixture
def trivy():
    return Trivy()


@pytest.fixture
def config(tmp_path):
    return Config(tmp_path / "config.yaml")


@pytest.fixture
def registry(config, trivy):
    return IntegrationRegistry(config, {"trivy": trivy})


def test_default_registry_lists_trivy(config):
    assert IntegrationRegistry(config).list() == ["trivy"]


def test_get_unknown_raises(registry):
    with pytest.raises(IntegrationNotFoundError, match="integration not found"):
        registry.get("unknown")


def test_get_returns_integration(registry, trivy):
    assert registry.get("trivy") is trivy


def test_analyzer_by_integration(registry):
    assert registry.analyzer_by_integration("VulnerabilityReport") == "trivy"
    with pytest.raises(IntegrationNotFoundError):
        registry.analyzer_by_integration("Pod")


def test_activate_deploys_and_merges_filters(registry, trivy, tmp_path):
    registry.activate("trivy", "security", ["Pod", "Service", "Pod"], False)
    assert trivy.is_activate() is True
    assert trivy.get_namespace() == "security"
    stored = Config(tmp_path / "config.yaml").get_string_list("active_filters")
    assert stored == ["Pod", "Service", "VulnerabilityReport", "ConfigAuditReport"]


def test_activate_with_skip_install(registry, trivy, config):
    registry.activate("trivy", "security", ["Pod"], True)
    assert trivy.is_activate() is False
    assert "ConfigAuditReport" in config.get_string_list("active_filters")


def test_activate_unknown_raises(registry):
    with pytest.raises(IntegrationNotFoundError):
        registry.activate("unknown", "ns", [], True)


def test_activate_write_failure(trivy):
    registry = IntegrationRegistry(Config(), {"trivy": trivy})
    with pytest.raises(OSError, match="error writing config file"):
        registry.activate("trivy", "ns", ["Pod"], True)


def test_deactivate_removes_filters_and_undeploys(registry, trivy, config):
    registry.activate("trivy", "security", ["Pod"], False)
    registry.deactivate("trivy", "security")
    assert trivy.is_activate() is False
    assert config.get_string_list("active_filters") == ["Pod"]


def test_deactivate_not_installed_raises(registry):
    with pytest.raises(KeyError):
        registry.deactivate("trivy", "security")


def test_is_activate(registry, trivy):
    assert registry.is_activate("trivy") is False
    trivy.deploy("ns")
    assert registry.is_activate("trivy") is True
    with pytest.raises(IntegrationNotFoundError):
        registry.is_activate("unknown")