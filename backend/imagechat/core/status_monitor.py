"""
Status Monitor - Liveness probe for the model-serving API.
"""

import logging

from ..ollama.base import ModelServingGateway

logger = logging.getLogger(__name__)


class StatusMonitor:
    """
    Answers "is the serving API up right now?".
    Every call issues a fresh request; nothing is cached and nothing is retried.
    """

    def __init__(self, gateway: ModelServingGateway):
        self.gateway = gateway

    async def probe(self) -> bool:
        """
        Probe the model-list endpoint once.

        Returns:
            True iff the serving API answered with a success status
        """
        reachable = await self.gateway.is_reachable()
        logger.debug(f"Serving API at {self.gateway.base_url} reachable={reachable}")
        return reachable
