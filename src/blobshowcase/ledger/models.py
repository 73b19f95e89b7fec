"""Pydantic models for raw ledger responses."""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class ObjectPage(BaseModel):
    """One page of a cursor-paginated listing."""

    data: List[Dict[str, Any]] = Field(default_factory=list)
    next_cursor: Optional[str] = None
    has_next_page: bool = False

    @classmethod
    def from_result(cls, result: Optional[Dict[str, Any]]) -> "ObjectPage":
        result = result or {}
        return cls(
            data=result.get("data") or [],
            next_cursor=result.get("nextCursor"),
            has_next_page=bool(result.get("hasNextPage")),
        )


class OwnedObject(BaseModel):
    """Handle for an object owned by an address."""

    object_id: Optional[str] = None
    version: Optional[str] = None
    digest: Optional[str] = None
    object_type: Optional[str] = None
    payload: Dict[str, Any]  # Full original response item

    @classmethod
    def from_item(cls, item: Dict[str, Any]) -> "OwnedObject":
        data = item.get("data") or {}
        return cls(
            object_id=data.get("objectId"),
            version=data.get("version"),
            digest=data.get("digest"),
            object_type=data.get("type"),
            payload=item,
        )


class DynamicFieldRef(BaseModel):
    """Reference to a child object attached to an owned object."""

    object_id: Optional[str] = None
    name: Optional[Dict[str, Any]] = None
    object_type: Optional[str] = None
    parent_id: str  # Stamped by the listing call, not part of the response
    payload: Dict[str, Any]

    @classmethod
    def from_item(cls, item: Dict[str, Any], parent_id: str) -> "DynamicFieldRef":
        return cls(
            object_id=item.get("objectId"),
            name=item.get("name"),
            object_type=item.get("objectType"),
            parent_id=parent_id,
            payload=item,
        )


class ObjectDetail(BaseModel):
    """Full content of an object fetched by id."""

    object_id: Optional[str] = None
    parent_id: str = ""
    payload: Dict[str, Any]  # The `data` block from sui_getObject

    def as_raw(self) -> Dict[str, Any]:
        """Flatten back to the response shape with parentId merged in."""
        return {**self.payload, "parentId": self.parent_id}
