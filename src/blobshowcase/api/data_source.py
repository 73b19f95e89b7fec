"""Reactive-style data source over the fetch cascade."""

from enum import Enum
from typing import Dict, List, Optional

from blobshowcase.errors import ShowcaseError
from blobshowcase.projects.aggregator import filter_projects, paginate
from blobshowcase.projects.models import ProjectPage, ProjectRecord
from blobshowcase.retrieval.cascade import (
    STAGE_DETAILS,
    STAGE_FIELDS,
    STAGE_OWNED,
    CascadeResult,
    FetchCascade,
)
from blobshowcase.utils.logging import get_logger

logger = get_logger(__name__)


class DataSourceStatus(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    ERROR = "error"
    EMPTY = "empty"
    READY = "ready"


class ShowcaseDataSource:
    """
    Holds the latest cascade output for a view layer.

    Exposes per-stage loading flags, the Stage-A error and the list of
    normalized projects. ``refetch`` invalidates every stage and reruns the
    cascade from the first stage.
    """

    def __init__(self, cascade: FetchCascade):
        self.cascade = cascade
        self.cascade.on_stage_start = self._stage_started
        self.cascade.on_stage_end = self._stage_finished
        # Overlapping runs (refetch while a load is in flight) share the hooks, so count per stage.
        self._loading: Dict[str, int] = {}
        self._result: Optional[CascadeResult] = None
        self._error: Optional[ShowcaseError] = None
        self._run_id = 0

    def _stage_started(self, stage: str) -> None:
        self._loading[stage] = self._loading.get(stage, 0) + 1

    def _stage_finished(self, stage: str) -> None:
        remaining = self._loading.get(stage, 0) - 1
        if remaining > 0:
            self._loading[stage] = remaining
        else:
            self._loading.pop(stage, None)

    @property
    def is_loading_objects(self) -> bool:
        return STAGE_OWNED in self._loading

    @property
    def is_loading_fields(self) -> bool:
        return STAGE_FIELDS in self._loading

    @property
    def is_loading_details(self) -> bool:
        return STAGE_DETAILS in self._loading

    @property
    def is_loading(self) -> bool:
        return bool(self._loading)

    @property
    def error(self) -> Optional[ShowcaseError]:
        return self._error

    @property
    def result(self) -> Optional[CascadeResult]:
        return self._result

    @property
    def projects(self) -> List[ProjectRecord]:
        return list(self._result.projects) if self._result else []

    @property
    def address(self) -> str:
        return self.cascade.address

    @property
    def status(self) -> DataSourceStatus:
        if self.is_loading:
            return DataSourceStatus.LOADING
        if self._error is not None:
            return DataSourceStatus.ERROR
        if self._result is None:
            return DataSourceStatus.IDLE
        return DataSourceStatus.READY if self._result.projects else DataSourceStatus.EMPTY

    async def load(self) -> List[ProjectRecord]:
        """
        Run the cascade and keep its output.

        Stage-A failures are recorded on ``error`` instead of raised.
        A run superseded by a later refetch does not overwrite the newer state.
        """
        self._run_id += 1
        run_id = self._run_id
        try:
            result = await self.cascade.run()
        except ShowcaseError as e:
            logger.error(f"Failed to fetch owned objects for {self.address}: {e}")
            if run_id == self._run_id:
                self._error = e
                self._result = None
            return []
        if run_id == self._run_id:
            self._error = None
            self._result = result
        return list(result.projects)

    async def refetch(self) -> List[ProjectRecord]:
        """Invalidate all cached stages and the project list, then reload."""
        self.cascade.invalidate()
        self._result = None
        return await self.load()

    def view(self, term: str = "", mode: str = "all", page: int = 1, page_size: int = 6) -> ProjectPage:
        """Filtered, de-duplicated page of the current projects."""
        return paginate(filter_projects(self.projects, term, mode), page, page_size)
