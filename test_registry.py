"""
Connector registry tests

Covers system identifier resolution, the availability listing and how
construction failures surface.
"""

import pytest

import connectors.base as base
from connectors import ConnectorFactory, PersonConnector, register_connector
from connectors.itop import ITopConnector
from core.config import ConnectorConfig
from core.errors import ConnectorError


CONFIG = ConnectorConfig(
    base_url="https://cmdb.example.com/webservices/rest.php",
    api_version="1.3",
    auth_token="token",
)


class _Incomplete(PersonConnector):
    """Leaves every operation abstract."""


class TestResolution:

    def test_itop_is_registered(self):
        assert "itop" in ConnectorFactory.list_available()
        assert ConnectorFactory.has_connector("itop")
        assert ConnectorFactory.has_connector("iTop")

    def test_create_itop(self):
        connector = ConnectorFactory.create("itop", config=CONFIG)
        assert isinstance(connector, ITopConnector)
        assert connector.get_connector_name() == "itop"
        assert connector.config is CONFIG

    def test_identifier_is_case_insensitive(self):
        assert isinstance(ConnectorFactory.create("ITOP", config=CONFIG), ITopConnector)

    def test_debug_flag_reaches_client(self):
        connector = ConnectorFactory.create("itop", debug=True, config=CONFIG)
        assert connector.debug is True
        assert connector.client.debug is True

    def test_unknown_system(self):
        with pytest.raises(ConnectorError) as exc_info:
            ConnectorFactory.create("servicenow", config=CONFIG)
        assert "servicenow" in str(exc_info.value)
        assert "itop" in str(exc_info.value)
        assert not ConnectorFactory.has_connector("servicenow")

    def test_empty_system(self):
        with pytest.raises(ConnectorError):
            ConnectorFactory.create("", config=CONFIG)


class TestBrokenEntries:

    def test_non_connector_entry_is_not_available(self, monkeypatch):
        monkeypatch.setitem(base._connector_registry, "bogus", object)

        assert "bogus" not in ConnectorFactory.list_available()
        with pytest.raises(ConnectorError):
            ConnectorFactory.create("bogus", config=CONFIG)

    def test_abstract_entry_is_not_available(self, monkeypatch):
        monkeypatch.setitem(base._connector_registry, "incomplete", _Incomplete)

        assert "incomplete" not in ConnectorFactory.list_available()
        with pytest.raises(ConnectorError):
            ConnectorFactory.create("incomplete", config=CONFIG)

    def test_construction_failure_is_wrapped(self):
        bad_config = ConnectorConfig(base_url="https://cmdb.example.com", api_version="1.3")

        with pytest.raises(ConnectorError) as exc_info:
            ConnectorFactory.create("itop", config=bad_config)

        assert "construction failed" in str(exc_info.value)
        assert exc_info.value.__cause__ is not None


class TestDecorator:

    def test_registers_lowercased_key(self, monkeypatch):
        monkeypatch.setattr(base, "_connector_registry", dict(base._connector_registry))

        @register_connector("Fake")
        class FakeConnector(ITopConnector):
            pass

        assert FakeConnector.system_name == "fake"
        assert ConnectorFactory.has_connector("fake")
        assert isinstance(ConnectorFactory.create("fake", config=CONFIG), FakeConnector)
