"""
iTop connector tests

The REST client is replaced with an AsyncMock so each test controls the
response envelope and inspects the request that would have been sent.
"""

import asyncio
from unittest.mock import AsyncMock

import pytest

from core.config import ConnectorConfig
from core.errors import ApiError, ApiTransportError, InvalidIdError, ValidationError
from core.mapping import to_canonical
from core.models import CanonicalPerson
from connectors.base import LookupStatus
from connectors.itop.itop_connector import (
    CREATE_COMMENT,
    DELETE_COMMENT,
    OUTPUT_FIELDS,
    SEARCH_ALL_OQL,
    UPDATE_COMMENT,
    ITopConnector,
    build_search_key,
    escape_oql_like,
)
from connectors.itop.itop_models import ITopErrorCode, ITopResponse


def person_object(key, **fields):
    data = {"id": str(key), "name": "Doe", "status": "active"}
    data.update(fields)
    return {"code": 0, "message": "", "class": "Person", "key": str(key), "fields": data}


def response(*objects, code=0, message="ok"):
    payload = {"code": code, "message": message}
    if objects:
        payload["objects"] = {f"{o['class']}::{o['key']}": o for o in objects}
    return ITopResponse.model_validate(payload)


@pytest.fixture
def connector():
    config = ConnectorConfig(
        base_url="https://cmdb.example.com/webservices/rest.php",
        api_version="1.3",
        auth_token="token",
        default_org_id=4,
    )
    conn = ITopConnector(config)
    conn.client.make_request = AsyncMock()
    return conn


def sent_request(connector):
    connector.client.make_request.assert_awaited_once()
    return connector.client.make_request.await_args.args[0]


class TestConnection:

    def test_success(self, connector):
        connector.client.list_operations = AsyncMock(return_value=[])
        assert asyncio.run(connector.test_connection()) is True

    def test_any_failure_is_false(self, connector):
        connector.client.list_operations = AsyncMock(side_effect=ApiTransportError("refused"))
        assert asyncio.run(connector.test_connection()) is False

    def test_unexpected_exception_is_false(self, connector):
        connector.client.list_operations = AsyncMock(side_effect=RuntimeError("boom"))
        assert asyncio.run(connector.test_connection()) is False


class TestCreate:

    def test_sends_core_create(self, connector):
        connector.client.make_request.return_value = response(person_object(42, email="doe@example.com"))

        ref = asyncio.run(connector.create_person(to_canonical({"sn": "Doe", "mail": "doe@example.com"})))

        request = sent_request(connector)
        assert request.to_json_data() == {
            "operation": "core/create",
            "class": "Person",
            "comment": CREATE_COMMENT,
            "output_fields": OUTPUT_FIELDS,
            "fields": {
                "name": "Doe",
                "email": "doe@example.com",
                "status": "active",
                "org_id": 4,
            },
        }
        assert ref.id == "42"
        assert ref.data.id == 42
        assert ref.data.email == "doe@example.com"

    def test_empty_name_is_rejected_before_any_request(self, connector):
        with pytest.raises(ValidationError):
            asyncio.run(connector.create_person(CanonicalPerson(mail="x@example.com")))
        connector.client.make_request.assert_not_awaited()

    def test_no_objects_is_an_error(self, connector):
        connector.client.make_request.return_value = response()
        with pytest.raises(ApiError, match="No objects returned"):
            asyncio.run(connector.create_person(CanonicalPerson(commonName="Doe")))

    def test_more_than_one_person_is_an_error(self, connector):
        connector.client.make_request.return_value = response(person_object(1), person_object(2))
        with pytest.raises(ApiError, match="expected 1"):
            asyncio.run(connector.create_person(CanonicalPerson(commonName="Doe")))

    def test_backend_error_propagates(self, connector):
        connector.client.make_request.side_effect = ApiError("iTop API Error (100): bad org", 100)
        with pytest.raises(ApiError):
            asyncio.run(connector.create_person(CanonicalPerson(commonName="Doe")))


class TestLookup:

    def test_found(self, connector):
        connector.client.make_request.return_value = response(person_object(7, first_name="Jane"))

        person = asyncio.run(connector.get_person("7"))

        request = sent_request(connector)
        assert request.to_json_data() == {
            "operation": "core/get",
            "class": "Person",
            "key": 7,
            "output_fields": OUTPUT_FIELDS,
        }
        assert person.instanceID == "7"
        assert person.surname == "Doe"
        assert person.givenName == "Jane"

    def test_lookup_result_is_found(self, connector):
        connector.client.make_request.return_value = response(person_object(7))

        result = asyncio.run(connector.lookup_person("7"))

        assert result.is_found
        assert result.status == LookupStatus.FOUND
        assert result.error is None

    def test_object_selected_by_key_not_position(self, connector):
        connector.client.make_request.return_value = response(
            person_object(3, name="Other"),
            person_object(7, name="Wanted"),
        )
        person = asyncio.run(connector.get_person("7"))
        assert person.commonName == "Wanted"

    def test_empty_result_is_not_found(self, connector):
        connector.client.make_request.return_value = response(message="Found: 0")

        result = asyncio.run(connector.lookup_person("9"))

        assert result.status == LookupStatus.NOT_FOUND
        assert asyncio.run(connector.get_person("9")) is None

    def test_not_found_message_is_not_found(self, connector):
        connector.client.make_request.side_effect = ApiError(
            "iTop API Error (100): Person::9 not found", ITopErrorCode.INTERNAL_ERROR
        )
        assert asyncio.run(connector.get_person("9")) is None

    def test_other_errors_are_reported(self, connector):
        error = ApiError("iTop API Error (1): Invalid login", ITopErrorCode.UNAUTHORIZED)
        connector.client.make_request.side_effect = error

        result = asyncio.run(connector.lookup_person("9"))

        assert result.status == LookupStatus.ERROR
        assert result.error is error
        with pytest.raises(ApiError):
            asyncio.run(connector.get_person("9"))

    def test_transport_error_is_not_not_found(self, connector):
        connector.client.make_request.side_effect = ApiTransportError("HTTP Error: 502 Bad Gateway", 502)
        with pytest.raises(ApiTransportError):
            asyncio.run(connector.get_person("9"))

    @pytest.mark.parametrize("bad_id", ["", "abc", "0", "-1", "1.5", "٣", " "])
    def test_invalid_ids(self, connector, bad_id):
        with pytest.raises(InvalidIdError):
            asyncio.run(connector.get_person(bad_id))
        connector.client.make_request.assert_not_awaited()


class TestSearch:

    def test_list_all(self, connector):
        connector.client.make_request.return_value = response(person_object(1), person_object(2, name="Roe"))

        persons = asyncio.run(connector.search_persons(None, 100))

        request = sent_request(connector)
        assert request.key == SEARCH_ALL_OQL
        assert request.limit == 100
        assert [p.instanceID for p in persons] == ["1", "2"]
        assert [p.commonName for p in persons] == ["Doe", "Roe"]

    def test_query_is_matched_on_name_first_name_and_email(self, connector):
        connector.client.make_request.return_value = response()

        persons = asyncio.run(connector.search_persons("jane", 10))

        request = sent_request(connector)
        assert persons == []
        assert request.limit == 10
        assert "name LIKE '%jane%'" in request.key
        assert "first_name LIKE '%jane%'" in request.key
        assert "email LIKE '%jane%'" in request.key

    def test_empty_result_is_empty_list(self, connector):
        connector.client.make_request.return_value = response(message="Found: 0")
        assert asyncio.run(connector.search_persons("nobody")) == []

    def test_list_all_with_no_records_is_empty_list(self, connector):
        connector.client.make_request.return_value = response(message="Found: 0")

        assert asyncio.run(connector.search_persons()) == []
        assert sent_request(connector).key == SEARCH_ALL_OQL

    def test_identifier_falls_back_to_object_key(self, connector):
        record = {"code": 0, "message": "", "class": "Person", "key": "31", "fields": {"name": "Roe"}}
        connector.client.make_request.return_value = response(record)

        persons = asyncio.run(connector.search_persons())

        assert [p.instanceID for p in persons] == ["31"]

    def test_non_person_objects_are_skipped(self, connector):
        org = {"code": 0, "message": "", "class": "Organization", "key": "1", "fields": {"name": "ACME"}}
        connector.client.make_request.return_value = response(org, person_object(5))
        persons = asyncio.run(connector.search_persons())
        assert [p.instanceID for p in persons] == ["5"]


class TestSearchEscaping:

    @pytest.mark.parametrize("term,expected", [
        ("plain", "plain"),
        ("O'Brien", "O\\'Brien"),
        ("100%", "100\\%"),
        ("a_b", "a\\_b"),
        ("back\\slash", "back\\\\slash"),
    ])
    def test_escape(self, term, expected):
        assert escape_oql_like(term) == expected

    def test_quote_cannot_close_the_literal(self):
        key = build_search_key("x' OR 1=1 OR name LIKE '")
        assert "'%x\\' OR 1=1 OR name LIKE \\'%'" in key

    def test_empty_query_lists_all(self):
        assert build_search_key("") == SEARCH_ALL_OQL
        assert build_search_key(None) == SEARCH_ALL_OQL


class TestUpdate:

    def test_sends_only_supplied_fields(self, connector):
        connector.client.make_request.return_value = response(person_object(12, email="new@example.com"))

        updated = asyncio.run(connector.update_person("12", to_canonical({"mail": "new@example.com"})))

        request = sent_request(connector)
        assert request.to_json_data() == {
            "operation": "core/update",
            "class": "Person",
            "key": 12,
            "comment": UPDATE_COMMENT,
            "output_fields": OUTPUT_FIELDS,
            "fields": {"email": "new@example.com"},
        }
        assert updated.mail == "new@example.com"
        assert updated.instanceID == "12"

    def test_missing_object_is_an_error(self, connector):
        connector.client.make_request.return_value = response(person_object(99))
        with pytest.raises(ApiError):
            asyncio.run(connector.update_person("12", to_canonical({"mail": "x@example.com"})))

    def test_invalid_id(self, connector):
        with pytest.raises(InvalidIdError):
            asyncio.run(connector.update_person("abc", CanonicalPerson()))


class TestDelete:

    def test_sends_core_delete(self, connector):
        connector.client.make_request.return_value = response(message="Deleted: 1")

        asyncio.run(connector.delete_person("12"))

        assert sent_request(connector).to_json_data() == {
            "operation": "core/delete",
            "class": "Person",
            "key": 12,
            "comment": DELETE_COMMENT,
            "simulate": False,
        }

    def test_backend_error_propagates(self, connector):
        connector.client.make_request.side_effect = ApiError("iTop API Error (100): cannot delete", 100)
        with pytest.raises(ApiError):
            asyncio.run(connector.delete_person("12"))

    def test_invalid_id(self, connector):
        with pytest.raises(InvalidIdError):
            asyncio.run(connector.delete_person("x"))
        connector.client.make_request.assert_not_awaited()
