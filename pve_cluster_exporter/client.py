import asyncio
import logging

import aiohttp

from pve_cluster_exporter.errors import ProviderError

log = logging.getLogger(__name__)

REQUEST_TIMEOUT = 30


class ProxmoxClient:
    """Asynchronous read-only client for the Proxmox VE REST API."""

    def __init__(self, settings, base_url=None, session=None):
        self.base_url = base_url or f"https://{settings.host}:{settings.port}/api2/json"
        self.username = settings.username
        self.password = settings.password
        self.token_name = settings.token_name
        self.token_value = settings.token_value
        self.ssl = settings.verify_ssl

        self._session = session
        self._owns_session = session is None
        self._ticket = None
        self._ticket_lock = None

    @property
    def uses_token(self):
        return bool(self.token_name and self.token_value)

    async def open(self):
        if self._session is None:
            self._session = aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=REQUEST_TIMEOUT))
            self._owns_session = True

    async def close(self):
        if self._session is not None and self._owns_session:
            await self._session.close()
        self._session = None

    def _get_lock(self):
        # created lazily so the lock binds to the running loop
        if self._ticket_lock is None:
            self._ticket_lock = asyncio.Lock()
        return self._ticket_lock

    async def _login(self):
        url = f"{self.base_url}/access/ticket"
        data = {"username": self.username, "password": self.password}
        try:
            async with self._session.post(url, data=data, ssl=self.ssl) as resp:
                if resp.status != 200:
                    raise ProviderError(f"login as {self.username} failed with HTTP {resp.status}")
                body = await resp.json()
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            raise ProviderError(f"login as {self.username} failed: {e!r}") from e

        ticket = (body.get("data") or {}).get("ticket")
        if not ticket:
            raise ProviderError(f"login as {self.username} returned no ticket")
        log.debug(f"Obtained ticket for {self.username}")
        return ticket

    def _token_headers(self):
        token_id = self.token_name if "!" in self.token_name else f"{self.username}!{self.token_name}"
        return {"Authorization": f"PVEAPIToken={token_id}={self.token_value}"}

    async def _get_ticket(self, rejected=None):
        # concurrent requests rejected with the same ticket share one login
        async with self._get_lock():
            if self._ticket is None or self._ticket == rejected:
                self._ticket = await self._login()
            return self._ticket

    async def _get(self, path, params=None):
        if self._session is None:
            raise ProviderError("client session is not open")

        url = f"{self.base_url}{path}"
        rejected = None
        for attempt in range(2):
            headers = {"Accept": "application/json"}
            if self.uses_token:
                headers.update(self._token_headers())
            else:
                ticket = await self._get_ticket(rejected)
                headers["Cookie"] = f"PVEAuthCookie={ticket}"
            try:
                async with self._session.get(url, params=params, headers=headers, ssl=self.ssl) as resp:
                    if resp.status == 401 and not self.uses_token and attempt == 0:
                        log.info(f"Ticket rejected for {path}, logging in again")
                        rejected = ticket
                        continue
                    if resp.status != 200:
                        raise ProviderError(f"GET {path} returned HTTP {resp.status}")
                    body = await resp.json()
            except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
                raise ProviderError(f"GET {path} failed: {e!r}") from e

            if not isinstance(body, dict) or "data" not in body:
                raise ProviderError(f"GET {path} returned no data member")
            return body["data"]

        raise ProviderError(f"GET {path} unauthorized")

    async def get_cluster_status(self):
        return await self._get("/cluster/status")

    async def get_nodes(self):
        return await self._get("/nodes")

    async def get_cluster_resources(self, kind):
        return await self._get("/cluster/resources", params={"type": kind})

    async def get_version(self):
        return await self._get("/version")
