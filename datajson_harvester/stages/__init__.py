"""Pipeline stages, in execution order."""

from .download import DownloadResult, download_inventories
from .merge import MergeResult, merge_inventories
from .probe import ProbeResult, probe_inventories
from .source_list import SourceListError, SourceListResult, acquire_source_list

__all__ = [
    "DownloadResult",
    "MergeResult",
    "ProbeResult",
    "SourceListError",
    "SourceListResult",
    "acquire_source_list",
    "download_inventories",
    "merge_inventories",
    "probe_inventories",
]
