"""Tests for the new-version notice."""

from unittest.mock import Mock, patch

import httpx
import pytest

from cwtail.cli.version_check import DISABLE_ENV, VersionCheck
from cwtail.config import Config

URL = "https://pypi.org/pypi/cwtail/json"
GET = "cwtail.cli.version_check.httpx.get"


@pytest.fixture(autouse=True)
def allow_update_check(monkeypatch):
    monkeypatch.delenv(DISABLE_ENV, raising=False)


def response(version, status_code=200):
    mock = Mock(status_code=status_code)
    mock.json.return_value = {"info": {"version": version}}
    return mock


class TestVersionCheck:
    """Test VersionCheck."""

    def test_newer_version_reported(self):
        with patch(GET, return_value=response("0.2.0")):
            checker = VersionCheck("0.1.0", URL)
            checker.start()
            assert checker.newer_version(wait=5) == "0.2.0"

    def test_same_version_not_reported(self):
        with patch(GET, return_value=response("0.1.0")):
            checker = VersionCheck("0.1.0", URL)
            checker.start()
            assert checker.newer_version(wait=5) is None

    def test_network_failure_is_silent(self):
        with patch(
            GET,
            side_effect=httpx.ConnectError("offline"),
        ):
            checker = VersionCheck("0.1.0", URL)
            checker.start()
            assert checker.latest(wait=5) is None

    def test_bad_payload_is_silent(self):
        bad = Mock(status_code=200)
        bad.json.side_effect = ValueError("not json")
        with patch(GET, return_value=bad):
            checker = VersionCheck("0.1.0", URL)
            checker.start()
            assert checker.latest(wait=5) is None

    def test_disabled_by_environment(self, monkeypatch):
        monkeypatch.setenv(DISABLE_ENV, "1")
        with patch(GET) as get:
            checker = VersionCheck("0.1.0", URL)
            checker.start()

            assert checker.newer_version() is None
            get.assert_not_called()

    def test_from_config(self):
        config = Config()
        config.set("update_check.enabled", False)

        checker = VersionCheck.from_config(config, "0.1.0")

        assert checker.url == URL
        assert checker.enabled is False
