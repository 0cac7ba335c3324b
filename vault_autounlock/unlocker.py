"""
AutoUnlocker — Unlock all vaults flagged for it, in the background, at startup.

``unlock_all_silently()`` returns immediately. Vaults whose settings have
``unlock_after_startup`` enabled are snapshotted into a batch which a
:class:`PacedPipeline` processes on the event loop. Results are only
visible through logs, vault state and the optional outcome listener.
"""
import asyncio
import concurrent.futures
import logging
from collections.abc import Iterable
from concurrent.futures import Executor
from typing import Optional, Union

from .chain import UnlockChain, VaultOutcome
from .config import AutoUnlockConfig, NAP_TIME_MILLIS
from .keychain import KeychainAccess, get_keychain_access
from .pipeline import OutcomeListener, PacedPipeline
from .vault import Vault

logger = logging.getLogger("autounlock")


class AutoUnlocker:
    """Schedules silent auto-unlock of a vault list.

    Args:
        keychain: Keychain holding the passphrases, or None if the platform has
            none. Without a keychain auto-unlock does nothing.
        vaults: Live collection of known vaults, read at scheduling time.
        executor: Executor for blocking unlock/mount/reveal calls.
        loop: Event loop to schedule on. When omitted, ``unlock_all_silently``
            must be called from a coroutine running on the target loop.
        pacing_interval: Seconds between two consecutive vaults.
        on_outcome: Optional listener receiving each vault's outcome.
    """

    def __init__(
        self,
        keychain: Optional[KeychainAccess],
        vaults: Iterable[Vault],
        executor: Optional[Executor] = None,
        loop: Optional[asyncio.AbstractEventLoop] = None,
        pacing_interval: float = NAP_TIME_MILLIS / 1000,
        on_outcome: Optional[OutcomeListener] = None,
    ):
        self._keychain = keychain
        self._vaults = vaults
        self._executor = executor
        self._loop = loop
        self._pacing_interval = pacing_interval
        self._on_outcome = on_outcome
        self._pipeline: Optional[PacedPipeline] = None
        self._pipeline_loop: Optional[asyncio.AbstractEventLoop] = None
        self._future: Optional[Union[asyncio.Task, concurrent.futures.Future]] = None

    @classmethod
    def from_config(
        cls, config: AutoUnlockConfig, vaults: Iterable[Vault], **kwargs,
    ) -> "AutoUnlocker":
        """Build an AutoUnlocker using the keychain and pacing from ``config``."""
        return cls(
            get_keychain_access(config),
            vaults,
            pacing_interval=config.pacing_interval,
            **kwargs,
        )

    @staticmethod
    def _should_unlock_after_startup(vault: Vault) -> bool:
        return vault.settings.unlock_after_startup

    @property
    def scheduled(self) -> bool:
        """True while a batch is pending or running."""
        return self._future is not None and not self._future.done()

    def unlock_all_silently(self) -> None:
        """Schedule auto-unlock of every flagged vault and return immediately."""
        if self._keychain is None:
            return
        batch = tuple(v for v in self._vaults if self._should_unlock_after_startup(v))
        if not batch:
            return
        loop = self._loop
        if loop is None:
            try:
                loop = asyncio.get_running_loop()
            except RuntimeError:
                logger.warning(
                    "Auto unlock of %d vault(s) not scheduled: no event loop "
                    "is running and none was given.", len(batch),
                )
                return
        pipeline = PacedPipeline(
            UnlockChain(self._keychain),
            pacing_interval=self._pacing_interval,
            executor=self._executor,
            on_outcome=self._on_outcome,
        )
        self._pipeline = pipeline
        self._pipeline_loop = loop
        if self._loop is None:
            self._future = loop.create_task(pipeline.run(batch))
        else:
            self._future = asyncio.run_coroutine_threadsafe(pipeline.run(batch), loop)
        logger.debug("Scheduled auto unlock of %d vault(s)", len(batch))

    def cancel(self) -> None:
        """Stop the running batch before its next vault. Safe from any thread."""
        if self._pipeline is None or not self.scheduled:
            return
        self._pipeline_loop.call_soon_threadsafe(self._pipeline.cancel)

    async def wait(self) -> list[VaultOutcome]:
        """Wait for the scheduled batch and return its outcomes.

        Returns an empty list when nothing was scheduled.
        """
        if self._future is None:
            return []
        if isinstance(self._future, concurrent.futures.Future):
            return await asyncio.wrap_future(self._future)
        return await self._future
