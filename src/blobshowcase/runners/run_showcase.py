import asyncio
from typing import Any, Dict, Optional

from blobshowcase.api.data_source import ShowcaseDataSource
from blobshowcase.config.loader import load_config_or_defaults, resolve_rpc_url
from blobshowcase.ledger.client import LedgerObjectClient
from blobshowcase.projects.models import ProjectPage
from blobshowcase.retrieval.cache import StageCache
from blobshowcase.retrieval.cascade import FetchCascade
from blobshowcase.utils.logging import get_logger

logger = get_logger(__name__)


def build_data_source(config: Dict[str, Any], client: Optional[LedgerObjectClient] = None) -> ShowcaseDataSource:
    """Wire client -> cascade -> data source from a merged config dict."""
    if client is None:
        client = LedgerObjectClient(
            resolve_rpc_url(config),
            timeout_seconds=config["timeout_seconds"],
            page_size=config["page_size"],
            user_agent=config["user_agent"],
        )
    cascade = FetchCascade(
        client,
        address=config["owner_address"],
        type_tag=config["blob_type"],
        cache=StageCache(ttl_seconds=config["cache_ttl_seconds"]),
        max_concurrency=config["max_concurrency"],
    )
    return ShowcaseDataSource(cascade)


def main(
    term: str = "",
    mode: str = "all",
    page: int = 1,
    page_size: Optional[int] = None,
    config: Optional[Dict[str, Any]] = None,
    client: Optional[LedgerObjectClient] = None,
) -> tuple[ShowcaseDataSource, Optional[ProjectPage]]:
    """
    Fetch the showcase once and return the requested page.

    - load config (file if present, defaults otherwise)
    - run the cascade through the data source
    - filter, de-duplicate and page the projects

    Returns:
        The data source and the page, or None for the page when Stage A failed
    """
    config = config or load_config_or_defaults()
    source = build_data_source(config, client=client)
    asyncio.run(source.load())

    if source.error is not None:
        return source, None

    view = source.view(term=term, mode=mode, page=page, page_size=page_size or config["projects_per_page"])
    logger.info(
        f"Showing page {view.page}/{max(view.total_pages, 1)} "
        f"({view.total_count} projects) for {source.address}"
    )
    return source, view
