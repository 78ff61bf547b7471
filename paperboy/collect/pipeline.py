"""High level collection orchestration.

``Collector`` walks the stages Planned -> Collecting -> Aggregated -> Ranked
-> Enriched -> Done. Snapshot fetches may run concurrently but buckets are
always folded in timestamp order, so the first-URL-wins rule is stable.
"""
from __future__ import annotations

import enum
import time
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional

import requests

from paperboy.collect.aggregate import Aggregator
from paperboy.collect.chartbeat import ChartbeatClient, SnapshotClient
from paperboy.collect.enrich import Enricher
from paperboy.collect.http_client import HttpClient
from paperboy.collect.intervals import plan_intervals
from paperboy.collect.rank import rank
from paperboy.collect.rewrite import Rewriter, RuleRewriter
from paperboy.core.config import CollectorConfig
from paperboy.core.errors import BucketFetchError
from paperboy.core.models import BucketSnapshot, StoryPackage, TimeWindow, UniqueStory
from paperboy.core.utils import format_ts, now_stamp
from paperboy.infra.logging import (
    get_unified_logger,
    log_batch_processing,
    log_error,
    log_task_end,
    log_task_start,
    mdc_put,
    mdc_remove,
)


class Stage(enum.Enum):
    PLANNED = "planned"
    COLLECTING = "collecting"
    AGGREGATED = "aggregated"
    RANKED = "ranked"
    ENRICHED = "enriched"
    DONE = "done"


class Collector:
    """Collect, merge, rank and enrich the most visited stories for a host.

    ``client`` defaults to a :class:`ChartbeatClient` built from the config's
    api key and host; ``rewriter`` defaults to the config's rewrite rules.
    Configuration problems raise before anything is fetched.
    """

    def __init__(
        self,
        config: CollectorConfig,
        client: Optional[SnapshotClient] = None,
        rewriter: Optional[Rewriter] = None,
        enricher: Optional[Enricher] = None,
        http: Optional[HttpClient] = None,
    ) -> None:
        self.config = config.validate(require_credentials=client is None)
        self.window = TimeWindow(config.start_time, config.end_time, config.interval)
        self._owned_http: Optional[HttpClient] = None
        if http is None and (client is None or enricher is None):
            http = HttpClient(timeout=config.timeout, pool_size=max(10, config.concurrency))
            self._owned_http = http
        self.client: SnapshotClient = client or ChartbeatClient(
            config.api_key, config.host, timeout=config.timeout, http=http
        )
        if rewriter is None and config.rules:
            rewriter = RuleRewriter.from_config(config.rules)
        self.rewriter = rewriter
        self.enricher = enricher or Enricher(
            img_query=config.img_query,
            blurb_query=config.blurb_query,
            attribute=config.attribute,
            timeout=config.timeout,
            http=http,
            concurrency=config.concurrency,
        )
        self.logger = get_unified_logger("collect", "pipeline")

        self.stage = Stage.PLANNED
        self.timestamps: List[int] = plan_intervals(self.window)
        self.failed_buckets: List[int] = []
        self.dropped_stories: List[UniqueStory] = []
        self.stories: List[UniqueStory] = []
        self.ranked: List[UniqueStory] = []
        self.packages: List[StoryPackage] = []

    def _set_stage(self, stage: Stage) -> None:
        self.stage = stage
        self.logger.info("stage -> %s", stage.value)

    def _fetch_one(self, ts: int) -> Optional[BucketSnapshot]:
        self.logger.info("Collecting for %s...", format_ts(ts))
        try:
            return self.client.fetch_snapshot(ts)
        except (requests.RequestException, OSError) as e:
            err = BucketFetchError(ts, str(e), e)
        except BucketFetchError as e:
            err = e
        self.logger.warning("Skipping bucket %s, results may be skewed: %s", format_ts(ts), err)
        return None

    def collect_buckets(self) -> List[Optional[BucketSnapshot]]:
        """Fetch every planned bucket; failed slots are None, order matches timestamps."""
        self._set_stage(Stage.COLLECTING)
        t0 = time.perf_counter()
        workers = max(1, min(self.config.concurrency, len(self.timestamps)))
        with ThreadPoolExecutor(max_workers=workers) as ex:
            futs = [ex.submit(self._fetch_one, ts) for ts in self.timestamps]
            buckets = [f.result() for f in futs]
        self.failed_buckets = [ts for ts, b in zip(self.timestamps, buckets) if b is None]
        log_batch_processing(
            "collect",
            "pipeline",
            "fetch_snapshots",
            total_items=len(buckets),
            success_count=len(buckets) - len(self.failed_buckets),
            failure_count=len(self.failed_buckets),
            duration=time.perf_counter() - t0,
            status="success",
        )
        return buckets

    def aggregate(self, buckets: List[Optional[BucketSnapshot]]) -> List[UniqueStory]:
        agg = Aggregator(self.config.host or "", self.rewriter)
        for bucket in buckets:
            if bucket is not None:
                agg.fold_snapshot(bucket)
        self.stories = agg.stories()
        self._set_stage(Stage.AGGREGATED)
        return self.stories

    def collect_stories(self) -> List[UniqueStory]:
        """Collect, merge and rank; returns the top stories before enrichment."""
        self.aggregate(self.collect_buckets())
        self.ranked = rank(self.stories, self.config.top_n)
        self._set_stage(Stage.RANKED)
        return self.ranked

    def run(self) -> List[StoryPackage]:
        run_id = now_stamp()
        mdc_put("host", self.config.host)
        mdc_put("run_id", run_id)
        log_task_start(
            "collect",
            "run",
            {
                "host": self.config.host,
                "start": format_ts(self.window.start),
                "end": format_ts(self.window.end),
                "buckets": len(self.timestamps),
                "top_n": self.config.top_n,
            },
        )
        try:
            ranked = self.collect_stories()
            results = self.enricher.enrich_each(ranked)
            self.packages = [p for p in results if p is not None]
            self.dropped_stories = [s for s, p in zip(ranked, results) if p is None]
            self._set_stage(Stage.ENRICHED)
            self._set_stage(Stage.DONE)
            log_task_end(
                "collect",
                "run",
                True,
                {
                    "stories": len(self.stories),
                    "packages": len(self.packages),
                    "failed_buckets": len(self.failed_buckets),
                    "dropped": len(self.dropped_stories),
                },
            )
            return self.packages
        except Exception as e:
            log_error("collect", "run", e, f"run aborted at stage {self.stage.value}")
            log_task_end("collect", "run", False, {"stage": self.stage.value})
            raise
        finally:
            mdc_remove("host")
            mdc_remove("run_id")
            self.close()

    @property
    def dropped_urls(self) -> List[str]:
        return [s.url for s in self.dropped_stories]

    def close(self) -> None:
        """Close the HTTP session this collector created, if any."""
        if self._owned_http is not None:
            self._owned_http.close()

    def __enter__(self) -> "Collector":
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()
