"""Startup sequence for global stores.

The bootstrap runs once, after the composition root created the registry and
before any consumer resolves a global store: every registrar registers its
stores, then every store that needs it is initialized (loading persisted
items).
"""

import asyncio
from collections.abc import Iterable
import logging

from .context import trace_context
from .persistence import AsyncInitializable
from .registration import DataStoreRegistrar
from .registry import GlobalStoreRegistry

__all__ = ["DataStoreBootstrap"]

_LOGGER = logging.getLogger(__name__)


class DataStoreBootstrap:
    """Registers and initializes global stores exactly once."""

    def __init__(
        self,
        registry: GlobalStoreRegistry,
        registrars: Iterable[DataStoreRegistrar],
        initializables: Iterable[AsyncInitializable] = (),
    ) -> None:
        """Initialize the DataStoreBootstrap.

        Args:
            registry: The registry the registrars register into.
            registrars: Registrars run in order.
            initializables: Additional components initialized after the stores.
        """
        if registry is None:
            raise ValueError("registry must not be None")
        if registrars is None:
            raise ValueError("registrars must not be None")
        self._registry = registry
        self._registrars = list(registrars)
        self._initializables = list(initializables)
        self._lock = asyncio.Lock()
        self._registered = False
        self._done = False

    @property
    def done(self) -> bool:
        return self._done

    async def run(self) -> None:
        """Run the startup sequence, doing nothing if it already completed."""
        async with self._lock:
            if self._done:
                _LOGGER.debug("Bootstrap already completed")
                return
            with trace_context("Bootstrap"):
                if not self._registered:
                    with trace_context("Register stores"):
                        for registrar in self._registrars:
                            registrar.register(self._registry)
                    self._registered = True
                # Registrars run once even when initialization is retried.
                with trace_context("Initialize stores"):
                    for initializable in self._registry.initializable_stores():
                        await initializable.initialize()
                    for initializable in self._initializables:
                        await initializable.initialize()
            self._done = True

    def run_sync(self) -> None:
        """Run the startup sequence from synchronous code without a running loop."""
        asyncio.run(self.run())
