"""API layer: the collection surface consumed by views.

Views read loading flags, the Stage-A error and the normalized projects from
``ShowcaseDataSource`` and call the aggregator for filtering and paging.
No fetching or decoding logic lives here.
"""

from .data_source import DataSourceStatus, ShowcaseDataSource

__all__ = ["DataSourceStatus", "ShowcaseDataSource"]
