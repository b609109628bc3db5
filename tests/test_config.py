import pytest

from nano_openstack.config import DEFAULT_BASE_URL, Settings, get_settings

ENV_VARS = [
    "DEPLOYMENT_OS_URL",
    "DEPLOYMENT_OS_USER_DOMAIN",
    "DEPLOYMENT_OS_INSECURE",
    "DEPLOYMENT_OS_FLOATING_IP_POOL",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults():
    s = get_settings()
    assert s.base_url == DEFAULT_BASE_URL
    assert s.user_domain_name == "Default"
    assert s.verify is True
    assert s.floating_ip_pool is None
    assert s.identity_url == "http://openstack.nanocloud.org:5000/v3/"


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("DEPLOYMENT_OS_URL", "https://os.example.com")
    monkeypatch.setenv("DEPLOYMENT_OS_USER_DOMAIN", "corp")
    monkeypatch.setenv("DEPLOYMENT_OS_INSECURE", "yes")
    monkeypatch.setenv("DEPLOYMENT_OS_FLOATING_IP_POOL", "public")

    s = Settings.from_env()
    assert s.base_url == "https://os.example.com"
    assert s.user_domain_name == "corp"
    assert s.verify is False
    assert s.floating_ip_pool == "public"


def test_endpoint_shapes():
    s = Settings(base_url="http://cloud.test/")
    assert s.identity_url == "http://cloud.test:5000/v3/"
    assert s.compute_url("abc123") == "http://cloud.test:8774/v2/abc123"
    assert s.image_url == "http://cloud.test:9292/v2/"


def test_insecure_falsey_keeps_verification(monkeypatch):
    monkeypatch.setenv("DEPLOYMENT_OS_INSECURE", "0")
    assert Settings.from_env().verify is True
