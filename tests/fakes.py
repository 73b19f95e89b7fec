"""Fake JSON-RPC transport and raw ledger payload builders."""

import threading
from typing import Any, Callable, Dict, List, Optional

import requests

from blobshowcase.errors import RemoteError
from blobshowcase.ledger.client import validate_object_id
from blobshowcase.ledger.models import DynamicFieldRef, ObjectDetail, OwnedObject

OWNER = "0x18a4c45a96c15d62b82b341f18738125bf875fee86057d88589a183700601a1c"
BLOB_TYPE = "0xfdc88f7d7cf30afab2f82e8380d11ee8f70efb90e863d1de8616fae1bb09ea77::blob::Blob"


class FakeResponse:
    def __init__(self, payload: Any, status_code: int = 200):
        self._payload = payload
        self.status_code = status_code

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error", response=self)

    def json(self) -> Any:
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload


class FakeSession:
    """Stands in for requests.Session; routes JSON-RPC calls to per-method handlers."""

    def __init__(self, handlers: Dict[str, Callable[[List[Any]], Any]]):
        self.handlers = handlers
        self.calls: List[Dict[str, Any]] = []
        self.closed = False

    def post(self, url, json=None, headers=None, timeout=None):
        self.calls.append({"url": url, "body": json, "headers": headers, "timeout": timeout})
        handler = self.handlers[json["method"]]
        outcome = handler(json["params"])
        if isinstance(outcome, FakeResponse):
            return outcome
        if isinstance(outcome, Exception):
            raise outcome
        return FakeResponse({"jsonrpc": "2.0", "id": json["id"], "result": outcome})

    def close(self) -> None:
        self.closed = True

    def methods(self) -> List[str]:
        return [call["body"]["method"] for call in self.calls]


def make_entries(fields: Dict[str, str]) -> List[Dict[str, Any]]:
    return [
        {"type": "0x2::vec_map::Entry<0x1::string::String, 0x1::string::String>", "fields": {"key": k, "value": v}}
        for k, v in fields.items()
    ]


def make_detail(
    fields: Optional[Dict[str, str]] = None,
    object_id: str = "0xdetail1",
    parent_id: str = "0xblob1",
) -> Dict[str, Any]:
    """Raw object detail dict in the shape sui_getObject returns, plus parentId."""
    return {
        "objectId": object_id,
        "version": "1",
        "digest": "digest",
        "parentId": parent_id,
        "content": {
            "dataType": "moveObject",
            "fields": {
                "id": {"id": object_id},
                "name": [109, 101, 116, 97],
                "value": {
                    "fields": {
                        "metadata": {
                            "fields": {"contents": make_entries(fields or {})},
                        },
                    },
                },
            },
        },
    }


def owned_item(object_id: Optional[str]) -> Dict[str, Any]:
    data = {"version": "7", "digest": "d", "type": BLOB_TYPE}
    if object_id:
        data["objectId"] = object_id
    return {"data": data}


def field_item(object_id: str) -> Dict[str, Any]:
    return {
        "name": {"type": "vector<u8>", "value": [109, 101, 116, 97]},
        "objectId": object_id,
        "objectType": "0x2::dynamic_field::Field<vector<u8>, 0x2::vec_map::VecMap>",
        "type": "DynamicField",
    }


def page(items: List[Dict[str, Any]], next_cursor: Optional[str] = None, has_next: bool = False) -> Dict[str, Any]:
    return {"data": items, "nextCursor": next_cursor, "hasNextPage": has_next}




class FakeLedgerClient:
    """In-memory client: owned ids -> field ids -> raw details."""

    def __init__(self, owned=None, fields=None, details=None, failing=()):
        self.owned = owned or []
        self.fields = fields or {}
        self.details = details or {}
        self.failing = set(failing)
        self.calls = []
        self._lock = threading.Lock()

    def _record(self, *call):
        with self._lock:
            self.calls.append(call)

    def list_owned_by_type(self, address, type_tag):
        validate_object_id(address)
        self._record("owned", address)
        if "owned" in self.failing:
            raise RemoteError("node unavailable", method="suix_getOwnedObjects")
        return [OwnedObject.from_item(owned_item(object_id)) for object_id in self.owned]

    def list_dynamic_fields(self, parent_id):
        self._record("fields", parent_id)
        if parent_id in self.failing:
            raise RemoteError("boom", method="suix_getDynamicFields")
        return [
            DynamicFieldRef(object_id=field_id, parent_id=parent_id, payload={"objectId": field_id})
            for field_id in self.fields.get(parent_id, [])
        ]

    def get_object(self, object_id, parent_id=""):
        self._record("object", object_id)
        if object_id in self.failing:
            raise RemoteError("boom", method="sui_getObject")
        raw = self.details.get(object_id)
        if raw is None:
            return None
        return ObjectDetail(object_id=object_id, parent_id=parent_id, payload=raw)

    def kinds(self):
        return [call[0] for call in self.calls]


def blob_detail(object_id: str, name: str, **extra: str) -> Dict[str, Any]:
    """sui_getObject `data` block for a showcase project named ``name``."""
    raw = make_detail({"site-name": name, "showcase_url": name.lower(), **extra}, object_id=object_id)
    raw.pop("parentId")
    return raw
