import logging
from typing import Iterable

import httpx

from config import Settings, settings

logger = logging.getLogger("storefront")


async def revalidate_paths(paths: Iterable[str], config: Settings = settings) -> None:
    """Ask the storefront frontend to drop cached renderings of ``paths``.

    Best-effort: failures are logged and never propagate.
    """
    paths = list(paths)
    if not config.revalidate_url or not paths:
        logger.debug("Revalidation skipped for %s", paths)
        return
    headers = {}
    if config.revalidate_secret:
        headers["Authorization"] = f"Bearer {config.revalidate_secret}"
    try:
        async with httpx.AsyncClient(timeout=5) as client:
            response = await client.post(
                config.revalidate_url, json={"paths": paths}, headers=headers
            )
        response.raise_for_status()
    except httpx.HTTPError as exc:
        logger.warning("Unable to revalidate %s: %s", paths, exc)
