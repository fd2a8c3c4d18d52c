"""Engine components: fetch, fan out, parse, dedup, export."""

from .dedup import RecordDeduplicator
from .fetcher import FetchError, FetchRequest, FetchResponse, Fetcher
from .parser import ParsedInventory, Parser
from .thread_pool import TaskOutcome, ThreadPoolManager

__all__ = [
    "FetchError",
    "FetchRequest",
    "FetchResponse",
    "Fetcher",
    "ParsedInventory",
    "Parser",
    "RecordDeduplicator",
    "TaskOutcome",
    "ThreadPoolManager",
]
