import asyncio
import logging
from typing import Callable, List, Set

from zeroconf import IPVersion, ServiceStateChange, Zeroconf
from zeroconf.asyncio import AsyncServiceBrowser, AsyncServiceInfo, AsyncZeroconf

from .constants import DISCOVERY_TIMEOUT, RESOLVE_TIMEOUT_MS, SERVICE_TYPE
from .exceptions import ConnectionFailedException
from .models import ServiceRecord

_LOGGER = logging.getLogger(__name__)


def record_from_info(info: AsyncServiceInfo) -> ServiceRecord:
    return ServiceRecord(
        name=info.name,
        host=info.server or "",
        addresses_v4=info.parsed_addresses(IPVersion.V4Only),
        addresses_v6=info.parsed_addresses(IPVersion.V6Only),
        port=info.port or 0,
    )


def connection_string(ip: str, port: int) -> str:
    if ":" in ip:
        ip = f"[{ip}]"
    return f"tcp://{ip}:{port}"


def format_record(record: ServiceRecord) -> List[str]:
    """One block per address, IPv4 first."""
    lines = []
    for ip in record.addresses_v4 + record.addresses_v6:
        lines += [
            f"Name: {record.name}",
            f"Host: {record.host}",
            f"IP: {ip}",
            f"Port: {record.port}",
            f"Address: {connection_string(ip, record.port)}",
            "",
        ]
    return lines


async def _resolve(
    zc: Zeroconf, service_type: str, name: str, on_record: Callable[[ServiceRecord], None]
) -> None:
    info = AsyncServiceInfo(service_type, name)
    if not await info.async_request(zc, RESOLVE_TIMEOUT_MS):
        _LOGGER.debug("Could not resolve %s", name)
        return
    on_record(record_from_info(info))


async def discover(
    on_record: Callable[[ServiceRecord], None], timeout: float = DISCOVERY_TIMEOUT
) -> None:
    """Browse for purifiers for ``timeout`` seconds, reporting each resolved service."""
    try:
        aiozc = AsyncZeroconf(ip_version=IPVersion.All)
    except OSError as e:
        raise ConnectionFailedException(f"Failed to start discovery: {e}") from e

    tasks: Set[asyncio.Task] = set()

    def on_service_state_change(
        zeroconf: Zeroconf, service_type: str, name: str, state_change: ServiceStateChange
    ) -> None:
        if state_change is not ServiceStateChange.Added:
            return
        _LOGGER.debug("Found %s", name)
        tasks.add(asyncio.ensure_future(_resolve(zeroconf, service_type, name, on_record)))

    browser = AsyncServiceBrowser(
        aiozc.zeroconf, [SERVICE_TYPE], handlers=[on_service_state_change]
    )
    try:
        await asyncio.sleep(timeout)
    finally:
        await browser.async_cancel()
        for result in await asyncio.gather(*tasks, return_exceptions=True):
            if isinstance(result, Exception):
                _LOGGER.warning("Failed to resolve service: %s", result)
        await aiozc.async_close()
