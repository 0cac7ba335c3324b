"""
PacedPipeline — Process a batch of vaults one at a time with a pause between.

The first vault is processed immediately; every following vault waits for
the pacing interval, so the keychain never sees a burst of reads at startup.
The pause is the only point where cancellation is honoured: a vault whose
chain is already running always finishes.
"""
import asyncio
import logging
from collections.abc import Callable, Sequence
from concurrent.futures import Executor
from typing import Optional

from .chain import UnlockChain, VaultOutcome
from .config import NAP_TIME_MILLIS
from .vault import Vault

logger = logging.getLogger("autounlock")

OutcomeListener = Callable[[VaultOutcome], None]


class PacedPipeline:
    """Sequential auto-unlock of a fixed batch.

    Args:
        chain: Per-vault unlock chain.
        pacing_interval: Seconds to wait before each vault after the first.
        executor: Executor for the blocking chain calls; None uses the loop default.
        on_outcome: Optional listener called with each vault's outcome.
    """

    def __init__(
        self,
        chain: UnlockChain,
        pacing_interval: float = NAP_TIME_MILLIS / 1000,
        executor: Optional[Executor] = None,
        on_outcome: Optional[OutcomeListener] = None,
    ):
        self._chain = chain
        self._interval = pacing_interval
        self._executor = executor
        self._on_outcome = on_outcome
        self._cancelled = asyncio.Event()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def cancel(self) -> None:
        """Abort the batch at the next pause. Must be called on the loop thread."""
        self._cancelled.set()

    async def _nap(self) -> bool:
        """Wait for the pacing interval. Returns True if cancelled meanwhile."""
        if self._cancelled.is_set():
            return True
        try:
            await asyncio.wait_for(self._cancelled.wait(), timeout=self._interval)
        except asyncio.TimeoutError:
            return False
        return True

    async def _process(self, vault: Vault) -> Optional[VaultOutcome]:
        loop = asyncio.get_running_loop()
        try:
            outcome = await loop.run_in_executor(
                self._executor, self._chain.process, vault,
            )
        except Exception:
            logger.exception("Unexpected error during auto unlock of %s", vault.path)
            return None
        if self._on_outcome is not None:
            try:
                self._on_outcome(outcome)
            except Exception:
                logger.exception("Auto unlock outcome listener failed for %s", vault.path)
        return outcome

    async def run(self, batch: Sequence[Vault]) -> list[VaultOutcome]:
        """Process ``batch`` in order.

        Returns:
            Outcomes of the vaults that were processed.
        """
        assert batch, "vaults must not be empty"
        outcomes: list[VaultOutcome] = []
        try:
            for index, vault in enumerate(batch):
                if index and await self._nap():
                    logger.warning(
                        "Auto unlock cancelled, skipping %d remaining vault(s).",
                        len(batch) - index,
                    )
                    break
                outcome = await self._process(vault)
                if outcome is not None:
                    outcomes.append(outcome)
        except asyncio.CancelledError:
            logger.warning("Auto unlock task interrupted.")
            raise
        return outcomes
