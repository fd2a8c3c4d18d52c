"""Pipeline orchestrator running the four harvest stages in order."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from .config import ConfigRepository, HarvestConfig
from .engine import Fetcher, Parser, ThreadPoolManager
from .logging_conf import configure_logging
from .stages import (
    DownloadResult,
    MergeResult,
    ProbeResult,
    SourceListResult,
    acquire_source_list,
    download_inventories,
    merge_inventories,
    probe_inventories,
)
from .ui import ProgressActivity, ProgressReporter


@dataclass
class HarvestSummary:
    """Per-stage outcomes of one pipeline run."""

    source_list: SourceListResult | None = None
    probe: ProbeResult | None = None
    download: DownloadResult | None = None
    merge: MergeResult | None = None
    refresh: bool = False

    def as_rows(self) -> list[tuple[str, str]]:
        rows: list[tuple[str, str]] = []
        if self.source_list is not None:
            rows.append(
                ("source list", "downloaded" if self.source_list.downloaded else "cached")
            )
        if self.probe is not None:
            if self.probe.reused:
                rows.append(("probe", f"reused list, {len(self.probe.references)} inventories"))
            else:
                rows.append(
                    (
                        "probe",
                        f"{self.probe.probed} domains, {len(self.probe.references)} found, "
                        f"{self.probe.unresolved} without inventory",
                    )
                )
        if self.download is not None:
            rows.append(
                (
                    "download",
                    f"{len(self.download.downloaded)} downloaded, "
                    f"{len(self.download.failed)} failed, {len(self.download.skipped)} cached",
                )
            )
        if self.merge is not None:
            if self.merge.skipped:
                rows.append(("merge", "outputs already exist"))
            else:
                rows.append(
                    (
                        "merge",
                        f"{self.merge.records_out} records from {self.merge.inventories} "
                        f"inventories ({self.merge.duplicates} duplicates, "
                        f"{self.merge.dropped} dropped)",
                    )
                )
        return rows


class Orchestrator:
    """Run source list, probe, download and merge; each stage finishes before the next.

    ``refresh`` is passed to every stage explicitly and forces each one to
    redo its work even when cached files exist.
    """

    def __init__(
        self,
        config_repository: ConfigRepository,
        thread_pool: ThreadPoolManager | None = None,
        fetcher: Fetcher | None = None,
        progress_factory: Callable[[], ProgressReporter] | None = None,
    ) -> None:
        self.config_repository = config_repository
        self.locator = config_repository.locator
        self.config: HarvestConfig = config_repository.load_config()
        self.thread_pool = thread_pool or ThreadPoolManager()
        self._owns_fetcher = fetcher is None
        self.fetcher = fetcher or Fetcher(self.config)
        self.parser = Parser()
        self.progress_factory = progress_factory or (
            lambda: ProgressReporter(enabled=self.config.progress_bar)
        )
        self.logger = configure_logging(self.config.log_level, self.locator.logs_dir).bind(
            component="orchestrator"
        )

    def run(self, refresh: bool = False) -> HarvestSummary:
        summary = HarvestSummary(refresh=refresh)
        self.logger.info("harvest_start", refresh=refresh, root=str(self.locator.project_root))
        try:
            activity = ProgressActivity(enabled=self.config.progress_bar)
            activity.start("Fetching .gov domain directory...")
            try:
                summary.source_list = acquire_source_list(
                    self.config, self.locator, self.fetcher, refresh=refresh
                )
            finally:
                activity.close()

            summary.probe = probe_inventories(
                self.config,
                self.locator,
                self.fetcher,
                self.thread_pool,
                refresh=refresh,
                parser=self.parser,
                progress=self.progress_factory(),
            )
            summary.download = download_inventories(
                summary.probe.references,
                self.config,
                self.locator,
                self.fetcher,
                self.thread_pool,
                refresh=refresh,
                progress=self.progress_factory(),
            )
            summary.merge = merge_inventories(
                summary.probe.references,
                self.locator,
                refresh=refresh,
                parser=self.parser,
            )
        finally:
            self.close()
        self.logger.info("harvest_complete", refresh=refresh)
        return summary

    def close(self) -> None:
        self.thread_pool.shutdown()
        if self._owns_fetcher:
            self.fetcher.close()


__all__ = ["HarvestSummary", "Orchestrator"]
