"""Per-scrape collection of every measurement definition.

Each definition fetches its own remote collection and is collected
concurrently with the others. A definition that fails contributes no samples
to the scrape but never stops the rest from being reported.
"""

import asyncio
import logging
import time
from collections import namedtuple

from prometheus_client import CollectorRegistry, GCCollector, PlatformCollector, ProcessCollector, generate_latest
from prometheus_client.core import GaugeMetricFamily

from pve_cluster_exporter import catalog
from pve_cluster_exporter.errors import FetchFailure, FormatFailure, ProviderError
from pve_cluster_exporter.mapper import map_family

log = logging.getLogger(__name__)

SnapshotEntry = namedtuple("SnapshotEntry", ["definition", "points"])

FETCHERS = {
    catalog.CLUSTER: lambda provider: provider.get_cluster_status(),
    catalog.NODE: lambda provider: provider.get_nodes(),
    catalog.VM: lambda provider: provider.get_cluster_resources("vm"),
    catalog.STORAGE: lambda provider: provider.get_cluster_resources("storage"),
    catalog.VERSION: lambda provider: provider.get_version(),
}


class ScrapeFetchCache:
    """Provider wrapper sharing one remote call per query within one scrape."""

    def __init__(self, provider):
        self._provider = provider
        self._calls = {}

    def _shared(self, key, call):
        task = self._calls.get(key)
        if task is None:
            task = self._calls[key] = asyncio.ensure_future(call())
        # a waiter timing out must not cancel the call for the others
        return asyncio.shield(task)

    def get_cluster_status(self):
        return self._shared(("cluster_status",), self._provider.get_cluster_status)

    def get_nodes(self):
        return self._shared(("nodes",), self._provider.get_nodes)

    def get_cluster_resources(self, kind):
        return self._shared(("cluster_resources", kind), lambda: self._provider.get_cluster_resources(kind))

    def get_version(self):
        return self._shared(("version",), self._provider.get_version)

    def close(self):
        for task in self._calls.values():
            if not task.done():
                task.cancel()
            elif not task.cancelled():
                # mark the outcome as retrieved
                task.exception()
        self._calls.clear()


class MeasurementCollector:
    """Fetches and maps the points of one measurement definition."""

    def __init__(self, definition, provider, timeout=None):
        self.definition = definition
        self.provider = provider
        self.timeout = timeout

    async def collect(self):
        name = self.definition.metric_name
        fetch = FETCHERS[self.definition.family]
        try:
            fetched = await asyncio.wait_for(fetch(self.provider), self.timeout)
        except asyncio.TimeoutError as e:
            raise FetchFailure(name, f"timed out after {self.timeout}s") from e
        except ProviderError as e:
            raise FetchFailure(name, e) from e

        try:
            return map_family(self.definition, fetched)
        except (TypeError, AttributeError) as e:
            raise FetchFailure(name, f"unexpected response shape: {e}") from e


class SnapshotCollector:
    """prometheus_client collector exposing one already collected snapshot."""

    def __init__(self, snapshot):
        self.snapshot = snapshot

    def collect(self):
        for definition, points in self.snapshot:
            family = GaugeMetricFamily(definition.metric_name, definition.help, labels=definition.label_names)
            for point in points:
                family.add_metric([point.labels[name] for name in definition.label_names], point.value)
            yield family


class SnapshotAssembler:
    """Builds a fresh snapshot and its exposition text on every scrape."""

    def __init__(self, measurement_catalog, provider, timeout=None, coalesce_fetches=False,
                 process_metrics=True):
        self.catalog = measurement_catalog
        self.provider = provider
        self.timeout = timeout
        self.coalesce_fetches = coalesce_fetches
        self.process_metrics = process_metrics

    async def collect(self):
        provider = ScrapeFetchCache(self.provider) if self.coalesce_fetches else self.provider
        collectors = [MeasurementCollector(definition, provider, self.timeout) for definition in self.catalog]
        try:
            results = await asyncio.gather(*(c.collect() for c in collectors), return_exceptions=True)
        finally:
            if self.coalesce_fetches:
                provider.close()

        snapshot = []
        for collector, result in zip(collectors, results):
            if isinstance(result, FetchFailure):
                log.warning(f"Collection failed for {result.metric_name}: {result.cause}")
                result = []
            elif isinstance(result, BaseException):
                log.error(f"Unexpected error collecting {collector.definition.metric_name}: {result!r}",
                          exc_info=result)
                result = []
            snapshot.append(SnapshotEntry(collector.definition, result))
        return snapshot

    def build_registry(self, snapshot):
        registry = CollectorRegistry()
        if self.process_metrics:
            ProcessCollector(registry=registry)
            PlatformCollector(registry=registry)
            GCCollector(registry=registry)
        registry.register(SnapshotCollector(snapshot))
        return registry

    def render(self, snapshot):
        try:
            return generate_latest(self.build_registry(snapshot))
        except Exception as e:
            log.exception(f"Formatting metrics failed: {e}")
            raise FormatFailure(str(e)) from e

    async def scrape(self):
        start = time.time()
        log.info("Collecting metrics...")
        snapshot = await self.collect()
        output = self.render(snapshot)

        failed = sum(1 for entry in snapshot if not entry.points)
        log.info(f"Metrics collected in {time.time() - start:.2f}s ({failed} of {len(snapshot)} without samples)")
        return output
