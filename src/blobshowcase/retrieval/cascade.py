"""Three-stage dependent fetch: owned Blobs -> dynamic fields -> object details."""

import asyncio
from dataclasses import dataclass, field
from datetime import datetime
from typing import Awaitable, Callable, List, Optional, TypeVar

from blobshowcase.errors import ShowcaseError
from blobshowcase.ledger.client import LedgerObjectClient
from blobshowcase.ledger.models import DynamicFieldRef, ObjectDetail, OwnedObject
from blobshowcase.parsing.normalizer import normalize_projects
from blobshowcase.projects.models import ProjectRecord
from blobshowcase.retrieval.cache import StageCache
from blobshowcase.utils.logging import get_logger

logger = get_logger(__name__)

STAGE_OWNED = "owned_objects"
STAGE_FIELDS = "dynamic_fields"
STAGE_DETAILS = "object_details"

T = TypeVar("T")


@dataclass
class CascadeResult:
    """Output of every stage of one cascade run."""

    owned_objects: List[OwnedObject] = field(default_factory=list)
    field_groups: List[List[DynamicFieldRef]] = field(default_factory=list)
    details: List[ObjectDetail] = field(default_factory=list)
    projects: List[ProjectRecord] = field(default_factory=list)
    stages_run: List[str] = field(default_factory=list)

    @property
    def fields(self) -> List[DynamicFieldRef]:
        return [ref for group in self.field_groups for ref in group]


class FetchCascade:
    """
    Runs the three collection stages in dependency order.

    Each stage is drained completely before the next starts and only runs
    when its predecessor produced something to work on. Work inside a stage
    fans out concurrently, bounded by ``max_concurrency``.
    """

    def __init__(
        self,
        client: LedgerObjectClient,
        *,
        address: str,
        type_tag: str,
        cache: Optional[StageCache] = None,
        max_concurrency: int = 8,
    ):
        self.client = client
        self.address = address
        self.type_tag = type_tag
        self.cache = cache or StageCache()
        self.max_concurrency = max_concurrency
        self._semaphore: Optional[asyncio.Semaphore] = None
        self._semaphore_loop: Optional[asyncio.AbstractEventLoop] = None
        # Stage observers; the data source uses these for loading flags.
        self.on_stage_start: Optional[Callable[[str], None]] = None
        self.on_stage_end: Optional[Callable[[str], None]] = None

    def _notify(self, hook: Optional[Callable[[str], None]], stage: str) -> None:
        if hook is not None:
            hook(stage)

    def _limiter(self) -> asyncio.Semaphore:
        loop = asyncio.get_running_loop()
        if self._semaphore is None or self._semaphore_loop is not loop:
            self._semaphore = asyncio.Semaphore(self.max_concurrency)
            self._semaphore_loop = loop
        return self._semaphore

    async def _run_blocking(self, func: Callable[..., T], *args) -> T:
        async with self._limiter():
            return await asyncio.to_thread(func, *args)

    async def _staged(self, stage: str, work: Callable[[], Awaitable[T]]) -> T:
        self._notify(self.on_stage_start, stage)
        try:
            return await work()
        finally:
            self._notify(self.on_stage_end, stage)

    async def fetch_owned_objects(self) -> List[OwnedObject]:
        """
        Stage A: every Blob owned by the configured address.

        Raises:
            InvalidInputError: If the address is malformed
            RemoteError: On transport or RPC failure
        """
        key = (STAGE_OWNED, self.address, self.type_tag)

        async def fetch() -> List[OwnedObject]:
            owned = await self._run_blocking(self.client.list_owned_by_type, self.address, self.type_tag)
            logger.info(f"Fetched {len(owned)} owned objects for {self.address}")
            return owned

        return await self.cache.get_or_fetch(key, fetch)

    async def _fields_for(self, parent_id: str) -> List[DynamicFieldRef]:
        try:
            return await self._run_blocking(self.client.list_dynamic_fields, parent_id)
        except ShowcaseError as e:
            logger.warning(f"Failed to fetch dynamic fields for {parent_id}: {e}")
            return []

    async def fetch_dynamic_fields(self, owned: List[OwnedObject]) -> List[List[DynamicFieldRef]]:
        """Stage B: dynamic fields per owned object, grouped by parent in source order."""
        parent_ids = [obj.object_id for obj in owned if obj.object_id]
        if not parent_ids:
            return []
        key = (STAGE_FIELDS, tuple(parent_ids))

        async def fetch() -> List[List[DynamicFieldRef]]:
            groups = await asyncio.gather(*(self._fields_for(parent_id) for parent_id in parent_ids))
            logger.info(
                f"Fetched {sum(len(g) for g in groups)} dynamic fields across {len(groups)} objects"
            )
            return list(groups)

        return await self.cache.get_or_fetch(key, fetch)

    async def _detail_for(self, ref: DynamicFieldRef) -> Optional[ObjectDetail]:
        try:
            return await self._run_blocking(self.client.get_object, ref.object_id, ref.parent_id)
        except ShowcaseError as e:
            logger.warning(f"Failed to fetch object {ref.object_id}: {e}")
            return None

    async def fetch_object_details(self, groups: List[List[DynamicFieldRef]]) -> List[ObjectDetail]:
        """Stage C: full object for every field; absent or failed objects are dropped."""
        refs = [ref for group in groups for ref in group]
        if not refs:
            return []
        key = (STAGE_DETAILS, tuple(ref.object_id for ref in refs))

        async def fetch() -> List[ObjectDetail]:
            results = await asyncio.gather(*(self._detail_for(ref) for ref in refs))
            details = [detail for detail in results if detail is not None]
            dropped = len(results) - len(details)
            if dropped:
                logger.info(f"Dropped {dropped} missing object details")
            return details

        return await self.cache.get_or_fetch(key, fetch)

    async def run(self, now: Optional[datetime] = None) -> CascadeResult:
        """
        Run all stages in order and normalize the resulting details.

        Stage A errors propagate; later stages degrade to smaller results.
        """
        result = CascadeResult()

        result.owned_objects = await self._staged(STAGE_OWNED, self.fetch_owned_objects)
        result.stages_run.append(STAGE_OWNED)
        if not any(obj.object_id for obj in result.owned_objects):
            return result

        result.field_groups = await self._staged(
            STAGE_FIELDS, lambda: self.fetch_dynamic_fields(result.owned_objects)
        )
        result.stages_run.append(STAGE_FIELDS)
        if not result.fields:
            return result

        result.details = await self._staged(
            STAGE_DETAILS, lambda: self.fetch_object_details(result.field_groups)
        )
        result.stages_run.append(STAGE_DETAILS)

        result.projects = normalize_projects(result.details, now=now)
        logger.info(f"Normalized {len(result.projects)} projects from {len(result.details)} objects")
        return result

    def invalidate(self) -> None:
        """Drop all cached stage results; the next run starts again from Stage A."""
        self.cache.invalidate()
