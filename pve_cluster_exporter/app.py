import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Response
from prometheus_client import CONTENT_TYPE_LATEST

from pve_cluster_exporter.catalog import build_catalog
from pve_cluster_exporter.client import ProxmoxClient
from pve_cluster_exporter.collector import SnapshotAssembler
from pve_cluster_exporter.errors import FormatFailure

log = logging.getLogger(__name__)


def create_app(settings, provider=None, process_metrics=True):
    """Build the scrape endpoint.

    A ``provider`` may be injected in place of the Proxmox client; its
    lifecycle is then left to the caller.
    """
    client = None
    if provider is None:
        client = provider = ProxmoxClient(settings)

    assembler = SnapshotAssembler(
        build_catalog(),
        provider,
        timeout=settings.collect_timeout,
        coalesce_fetches=settings.coalesce_fetches,
        process_metrics=process_metrics,
    )

    @asynccontextmanager
    async def lifespan(app):
        if client is None:
            yield
            return
        log.info(f"Connecting to Proxmox API at {client.base_url}")
        await client.open()
        try:
            yield
        finally:
            await client.close()

    app = FastAPI(title="Proxmox VE exporter", lifespan=lifespan)
    app.state.assembler = assembler

    @app.get("/")
    async def index():
        return Response(content="Proxmox VE exporter, metrics exposed on /metrics\n", media_type="text/plain")

    @app.get("/metrics")
    async def metrics():
        try:
            data = await assembler.scrape()
        except FormatFailure as e:
            return Response(content=str(e), status_code=500, media_type="text/plain")
        return Response(content=data, media_type=CONTENT_TYPE_LATEST)

    return app
