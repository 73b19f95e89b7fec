import pytest
import requests

from blobshowcase.errors import InvalidInputError, RemoteError
from blobshowcase.ledger.client import LedgerObjectClient, validate_object_id

from fakes import BLOB_TYPE, OWNER, FakeResponse, FakeSession, field_item, owned_item, page


def _client(handlers, **kwargs):
    session = FakeSession(handlers)
    return LedgerObjectClient("https://rpc.example", session=session, **kwargs), session


def test_list_owned_by_type_drains_all_pages_in_order():
    pages = {
        None: page([owned_item("0x1"), owned_item("0x2")], "c1", True),
        "c1": page([owned_item("0x3")], "c2", True),
        "c2": page([owned_item("0x4")], None, False),
    }
    client, session = _client({"suix_getOwnedObjects": lambda params: pages[params[2]]})

    owned = client.list_owned_by_type(OWNER, BLOB_TYPE)

    assert [o.object_id for o in owned] == ["0x1", "0x2", "0x3", "0x4"]
    # Two pages flagged hasNextPage -> three calls
    assert session.methods() == ["suix_getOwnedObjects"] * 3
    cursors = [call["body"]["params"][2] for call in session.calls]
    assert cursors == [None, "c1", "c2"]


def test_owned_objects_request_shape():
    client, session = _client({"suix_getOwnedObjects": lambda params: page([])})

    assert client.list_owned_by_type(OWNER, BLOB_TYPE) == []

    body = session.calls[0]["body"]
    assert body["jsonrpc"] == "2.0"
    address, query, cursor, limit = body["params"]
    assert address == OWNER
    assert query["filter"] == {"MatchAny": [{"StructType": BLOB_TYPE}]}
    assert query["options"] == {"showContent": True}
    assert cursor is None
    assert limit == 50


def test_list_dynamic_fields_stamps_parent_id():
    pages = {
        None: page([field_item("0xf1")], "next", True),
        "next": page([field_item("0xf2")]),
    }
    client, session = _client({"suix_getDynamicFields": lambda params: pages[params[1]]})

    fields = client.list_dynamic_fields("0xblob")

    assert [f.object_id for f in fields] == ["0xf1", "0xf2"]
    assert {f.parent_id for f in fields} == {"0xblob"}
    assert len(session.calls) == 2


def test_has_next_page_without_cursor_stops():
    client, session = _client({"suix_getDynamicFields": lambda params: page([field_item("0xf1")], None, True)})

    fields = client.list_dynamic_fields("0xblob")

    assert len(fields) == 1
    assert len(session.calls) == 1


@pytest.mark.parametrize("bad", ["", "18a4c45a", None, 42, "1x00"])
def test_invalid_address_never_reaches_transport(bad):
    client, session = _client({})

    with pytest.raises(InvalidInputError):
        client.list_owned_by_type(bad, BLOB_TYPE)
    with pytest.raises(InvalidInputError):
        client.list_dynamic_fields(bad)
    with pytest.raises(InvalidInputError):
        client.get_object(bad)

    assert session.calls == []


def test_validate_object_id_returns_value():
    assert validate_object_id("0xabc") == "0xabc"


def test_get_object_returns_detail_with_parent():
    data = {"objectId": "0xd1", "version": "3", "content": {"fields": {}}}
    client, _ = _client({"sui_getObject": lambda params: {"data": data}})

    detail = client.get_object("0xd1", "0xblob")

    assert detail.object_id == "0xd1"
    assert detail.parent_id == "0xblob"
    assert detail.as_raw()["parentId"] == "0xblob"
    assert detail.as_raw()["content"] == {"fields": {}}


def test_get_object_absent_data_is_none():
    client, _ = _client({"sui_getObject": lambda params: {"error": {"code": "notExists", "object_id": "0xd1"}}})

    assert client.get_object("0xd1") is None


def test_transport_failure_is_remote_error():
    client, _ = _client({"suix_getOwnedObjects": lambda params: requests.ConnectionError("refused")})

    with pytest.raises(RemoteError) as exc_info:
        client.list_owned_by_type(OWNER, BLOB_TYPE)

    assert exc_info.value.method == "suix_getOwnedObjects"


def test_http_error_carries_status_code():
    client, _ = _client({"suix_getOwnedObjects": lambda params: FakeResponse({}, status_code=503)})

    with pytest.raises(RemoteError) as exc_info:
        client.list_owned_by_type(OWNER, BLOB_TYPE)

    assert exc_info.value.status_code == 503


def test_rpc_error_member_is_remote_error():
    client, _ = _client(
        {"suix_getDynamicFields": lambda params: FakeResponse({"jsonrpc": "2.0", "id": 1, "error": {"code": -32602, "message": "Invalid params"}})}
    )

    with pytest.raises(RemoteError, match="Invalid params"):
        client.list_dynamic_fields("0xblob")


def test_non_json_body_is_remote_error():
    client, _ = _client({"sui_getObject": lambda params: FakeResponse(ValueError("Expecting value"))})

    with pytest.raises(RemoteError):
        client.get_object("0xd1")


def test_page_size_is_configurable():
    client, session = _client({"suix_getDynamicFields": lambda params: page([])}, page_size=10)

    client.list_dynamic_fields("0xblob")

    assert session.calls[0]["body"]["params"][2] == 10


@pytest.mark.parametrize("result", [["unexpected"], "0xd1", 7])
def test_non_object_result_is_remote_error(result):
    client, _ = _client({"sui_getObject": lambda params: result})

    with pytest.raises(RemoteError, match="non-object result") as exc_info:
        client.get_object("0xd1")

    assert exc_info.value.method == "sui_getObject"


def test_non_object_page_result_is_remote_error():
    client, _ = _client({"suix_getOwnedObjects": lambda params: [page([])]})

    with pytest.raises(RemoteError):
        client.list_owned_by_type(OWNER, BLOB_TYPE)


def test_malformed_object_data_is_remote_error():
    client, _ = _client({"sui_getObject": lambda params: {"data": ["0xd1"]}})

    with pytest.raises(RemoteError, match="malformed object data"):
        client.get_object("0xd1")
