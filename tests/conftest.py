import pytest

DEMO_KEY = (
    0xD2EE7398, 0xC1963D5C, 0xAA54D7C8, 0x5DA5A588,
    0x7391688F, 0x3BE114E4, 0x07DFCCA9, 0x5053BCBC,
)


@pytest.fixture(autouse=True)
def no_key_env(monkeypatch):
    """Tests run against the config.yaml demo key unless they set one."""
    monkeypatch.delenv("CHACHARAND_KEY", raising=False)
    monkeypatch.delenv("CHACHARAND_CONFIG", raising=False)


@pytest.fixture
def demo_key():
    return DEMO_KEY
