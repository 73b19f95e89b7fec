"""Pydantic models for normalized projects."""

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

UNNAMED_PROJECT = "Unnamed Project"


class ProjectRecord(BaseModel):
    """
    A project decoded from one Blob metadata object.

    Field names follow the on-chain metadata keys through aliases; keys
    without a dedicated field are kept as extra string attributes.
    """

    model_config = ConfigDict(extra="allow", frozen=True)

    id: int
    parent_id: str = Field(default="", alias="parentId")
    blob_id: str = Field(default="", alias="blobId")
    site_name: Optional[str] = Field(default=None, alias="site-name")
    owner: Optional[str] = None
    showcase_url: Optional[str] = None
    start_date: Optional[str] = Field(default=None, alias="startDate")
    expired_date: Optional[str] = Field(default=None, alias="expiredDate")
    end_date: Optional[str] = None
    status: Optional[Union[int, float]] = None  # float only for the NaN sentinel
    epochs: Optional[Union[int, float]] = None
    ownership: Optional[Union[int, float]] = None
    is_build: bool = Field(default=False, alias="isBuild")
    quality: Optional[float] = None

    @property
    def display_name(self) -> str:
        return self.site_name or UNNAMED_PROJECT

    @property
    def extra_fields(self) -> Dict[str, Any]:
        """Passthrough metadata keys without a dedicated field."""
        return dict(self.__pydantic_extra__ or {})

    def to_metadata_dict(self) -> Dict[str, Any]:
        """Dump using the on-chain key names, skipping unset optional fields."""
        return self.model_dump(by_alias=True, exclude_none=True)


class ProjectPage(BaseModel):
    """One page of display projects."""

    page: int
    page_size: int
    total_pages: int
    total_count: int
    projects: List[ProjectRecord] = Field(default_factory=list)
