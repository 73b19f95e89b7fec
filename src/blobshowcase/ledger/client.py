"""JSON-RPC client for reading objects from a Sui full node."""

import itertools
from typing import Any, Callable, Dict, List, Optional

import requests

from blobshowcase.errors import InvalidInputError, RemoteError
from blobshowcase.ledger.models import DynamicFieldRef, ObjectDetail, ObjectPage, OwnedObject
from blobshowcase.utils.logging import get_logger

logger = get_logger(__name__)

ADDRESS_PREFIX = "0x"
DEFAULT_PAGE_SIZE = 50


def validate_object_id(value: Any, label: str = "address") -> str:
    """
    Check an address or object id against the ledger format.

    Raises:
        InvalidInputError: If the value is not a string starting with 0x
    """
    if not isinstance(value, str) or not value.startswith(ADDRESS_PREFIX):
        raise InvalidInputError(
            f"Invalid {label} format. {label.capitalize()} must start with {ADDRESS_PREFIX}"
        )
    return value


class LedgerObjectClient:
    """Thin wrapper over the three read calls the showcase needs."""

    def __init__(
        self,
        rpc_url: str,
        *,
        session: Optional[requests.Session] = None,
        timeout_seconds: float = 20,
        page_size: int = DEFAULT_PAGE_SIZE,
        user_agent: str = "blobshowcase/0.3",
    ):
        self.rpc_url = rpc_url
        self.session = session or requests.Session()
        self.timeout = timeout_seconds
        self.page_size = page_size
        self.user_agent = user_agent
        self._request_ids = itertools.count(1)

    def _get_headers(self) -> Dict[str, str]:
        return {
            "User-Agent": self.user_agent,
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    def _call(self, method: str, params: List[Any]) -> Any:
        """Issue one JSON-RPC request and return its `result` member."""
        body = {
            "jsonrpc": "2.0",
            "id": next(self._request_ids),
            "method": method,
            "params": params,
        }
        logger.debug(f"RPC {method} params={params}")
        try:
            response = self.session.post(
                self.rpc_url,
                json=body,
                headers=self._get_headers(),
                timeout=self.timeout,
            )
            response.raise_for_status()
            payload = response.json()
        except requests.RequestException as e:
            status_code = None
            if getattr(e, "response", None) is not None:
                status_code = e.response.status_code
            raise RemoteError(f"{method} failed: {e}", method=method, status_code=status_code) from e
        except ValueError as e:
            raise RemoteError(f"{method} returned a non-JSON body: {e}", method=method) from e

        if not isinstance(payload, dict):
            raise RemoteError(f"{method} returned an unexpected body", method=method)
        if payload.get("error"):
            error = payload["error"]
            message = error.get("message") if isinstance(error, dict) else str(error)
            raise RemoteError(f"{method} error: {message}", method=method)
        result = payload.get("result")
        if result is not None and not isinstance(result, dict):
            raise RemoteError(f"{method} returned a non-object result", method=method)
        return result

    def get_owned_objects_page(self, address: str, type_tag: str, cursor: Optional[str] = None) -> ObjectPage:
        validate_object_id(address, "address")
        query = {
            "filter": {"MatchAny": [{"StructType": type_tag}]},
            "options": {"showContent": True},
        }
        result = self._call("suix_getOwnedObjects", [address, query, cursor, self.page_size])
        return ObjectPage.from_result(result)

    def get_dynamic_fields_page(self, parent_id: str, cursor: Optional[str] = None) -> ObjectPage:
        validate_object_id(parent_id, "parentId")
        result = self._call("suix_getDynamicFields", [parent_id, cursor, self.page_size])
        return ObjectPage.from_result(result)

    def _drain(self, fetch_page: Callable[[Optional[str]], ObjectPage]) -> List[Dict[str, Any]]:
        """Follow cursors until the node reports no further pages."""
        items: List[Dict[str, Any]] = []
        cursor = None
        pages = 0
        while True:
            page = fetch_page(cursor)
            pages += 1
            items.extend(page.data)
            if not page.has_next_page:
                break
            if page.next_cursor is None:
                logger.warning("hasNextPage set without nextCursor; stopping pagination")
                break
            cursor = page.next_cursor
        logger.debug(f"Drained {pages} pages ({len(items)} items)")
        return items

    def list_owned_by_type(self, address: str, type_tag: str) -> List[OwnedObject]:
        """
        Fetch every object owned by ``address`` whose type matches ``type_tag``.

        Raises:
            InvalidInputError: If the address is malformed
            RemoteError: On transport or RPC failure
        """
        validate_object_id(address, "address")
        items = self._drain(lambda cursor: self.get_owned_objects_page(address, type_tag, cursor))
        return [OwnedObject.from_item(item) for item in items]

    def list_dynamic_fields(self, parent_id: str) -> List[DynamicFieldRef]:
        """Fetch every dynamic field of ``parent_id``, stamped with that parent id."""
        validate_object_id(parent_id, "parentId")
        items = self._drain(lambda cursor: self.get_dynamic_fields_page(parent_id, cursor))
        return [DynamicFieldRef.from_item(item, parent_id) for item in items]

    def get_object(self, object_id: str, parent_id: str = "") -> Optional[ObjectDetail]:
        """
        Fetch the full content of one object.

        Returns:
            ObjectDetail, or None when the node has no data for the id
        """
        validate_object_id(object_id, "objectId")
        result = self._call("sui_getObject", [object_id, {"showContent": True}])
        data = (result or {}).get("data")
        if not data:
            return None
        if not isinstance(data, dict):
            raise RemoteError("sui_getObject returned malformed object data", method="sui_getObject")
        return ObjectDetail(object_id=data.get("objectId"), parent_id=parent_id or "", payload=data)

    def close(self) -> None:
        self.session.close()
