"""HTTP client side of the coordinator protocol."""

from typing import Optional

import httpx
from loguru import logger

from ..solver.observer import ObserverSnapshot


def send_snapshot(
    url: str,
    snapshot: ObserverSnapshot,
    instance_id: str,
    timeout: float = 10.0,
    client: Optional[httpx.Client] = None,
) -> str:
    """
    POST snapshot to a coordinator and return its text response.

    Args:
        url: Coordinator endpoint
        snapshot: Partial observer state to submit
        instance_id: Identity of the submitting solver, sent as the InstanceId header
        timeout: Request timeout in seconds; must exceed the coordinator's quorum timeout
        client: Optional preconfigured client, e.g. one bound to a test app

    Raises:
        httpx.HTTPStatusError: If the coordinator answers with an error status
    """
    headers = {"InstanceId": instance_id, "Content-Type": "application/json"}
    payload = snapshot.to_json()
    if client is not None:
        response = client.post(url, content=payload, headers=headers, timeout=timeout)
    else:
        with httpx.Client(timeout=timeout) as owned:
            response = owned.post(url, content=payload, headers=headers)
    response.raise_for_status()
    logger.debug("[send_snapshot] {} -> {} ({})", instance_id, url, response.status_code)
    return response.text
