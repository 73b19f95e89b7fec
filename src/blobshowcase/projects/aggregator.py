"""Filter, search, de-duplicate and paginate normalized projects."""

import math
from enum import Enum
from typing import Dict, Iterable, List, Optional

from blobshowcase.projects.models import ProjectPage, ProjectRecord

DEFAULT_PROJECTS_PER_PAGE = 6


class SearchMode(str, Enum):
    ALL = "all"
    NAME = "name"
    OWNER = "owner"


def has_showcase_url(project: ProjectRecord) -> bool:
    return bool(project.showcase_url and project.showcase_url.strip())


def matches_search(project: ProjectRecord, term: Optional[str], mode: SearchMode | str = SearchMode.ALL) -> bool:
    """
    Case-insensitive substring match on site name and/or owner.

    Name is checked first; owner is only checked when the name did not match.

    Raises:
        ValueError: If mode is not all, name or owner
    """
    mode = SearchMode(mode)
    if not term:
        return True
    needle = term.lower()

    if mode in (SearchMode.ALL, SearchMode.NAME):
        if project.site_name and needle in project.site_name.lower():
            return True

    if mode in (SearchMode.ALL, SearchMode.OWNER):
        if project.owner and needle in project.owner.lower():
            return True

    return False


def _outranks(challenger: ProjectRecord, kept: ProjectRecord) -> bool:
    if challenger.quality is None:
        return False
    return kept.quality is None or challenger.quality > kept.quality


def dedupe_by_name(projects: Iterable[ProjectRecord]) -> List[ProjectRecord]:
    """
    Keep one project per display name.

    A later project replaces the kept one only when it has a quality and the
    kept one has none or a strictly lower one. Group order is first-seen order.
    """
    unique: Dict[str, ProjectRecord] = {}
    for project in projects:
        name = project.display_name
        kept = unique.get(name)
        if kept is None or _outranks(project, kept):
            unique[name] = project
    return list(unique.values())


def filter_projects(
    projects: Iterable[ProjectRecord],
    term: Optional[str] = "",
    mode: SearchMode | str = SearchMode.ALL,
) -> List[ProjectRecord]:
    """Showcase filter, then search, then de-duplicate."""
    mode = SearchMode(mode)
    filtered = [
        project
        for project in projects
        if has_showcase_url(project) and matches_search(project, term, mode)
    ]
    return dedupe_by_name(filtered)


def total_pages(count: int, page_size: int = DEFAULT_PROJECTS_PER_PAGE) -> int:
    if page_size < 1:
        raise ValueError(f"page_size must be >= 1, got {page_size}")
    return math.ceil(count / page_size)


def paginate(
    projects: List[ProjectRecord],
    page: int = 1,
    page_size: int = DEFAULT_PROJECTS_PER_PAGE,
) -> ProjectPage:
    """
    Slice one 1-based page out of the filtered collection.

    Pages past the end are empty.

    Raises:
        ValueError: If page or page_size is below 1
    """
    if page < 1:
        raise ValueError(f"page must be >= 1, got {page}")
    pages = total_pages(len(projects), page_size)
    end = page * page_size
    start = end - page_size
    return ProjectPage(
        page=page,
        page_size=page_size,
        total_pages=pages,
        total_count=len(projects),
        projects=projects[start:end],
    )


def format_address(address: Optional[str]) -> str:
    """Shorten an address to 0x1234...abcd form."""
    if not address:
        return ""
    return f"{address[:6]}...{address[-4:]}"


def showcase_link(project: ProjectRecord, base_url: str) -> Optional[str]:
    """Public URL of a project's built site, or None without a showcase_url."""
    if not has_showcase_url(project):
        return None
    return f"{base_url.rstrip('/')}/{project.showcase_url.strip()}/index.html"
