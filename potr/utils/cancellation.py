from __future__ import annotations

import asyncio
import logging
import signal
import threading
from typing import Optional

log = logging.getLogger("potr.cancel")


class CancellationToken:
    """
    One-shot stop flag shared between the translation loop and an interrupt handler.

    The handler only ever sets it; the loop only ever reads it, between messages.
    """

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        if not self._event.is_set():
            log.warning("Interrupt received, stopping after the current message")
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


def install_interrupt_handler(
    token: CancellationToken,
    loop: Optional[asyncio.AbstractEventLoop] = None,
) -> None:
    """
    Route the first SIGINT to token.cancel().

    The default handler is restored afterwards, so a second SIGINT raises
    KeyboardInterrupt even while a request is still in flight.
    """
    loop = loop or asyncio.get_running_loop()

    def _on_interrupt() -> None:
        token.cancel()
        loop.remove_signal_handler(signal.SIGINT)

    def _on_interrupt_fallback(signum, frame) -> None:
        token.cancel()
        signal.signal(signal.SIGINT, signal.default_int_handler)

    try:
        loop.add_signal_handler(signal.SIGINT, _on_interrupt)
    except NotImplementedError:
        # Windows event loops have no add_signal_handler
        signal.signal(signal.SIGINT, _on_interrupt_fallback)
    except RuntimeError as e:
        # Not on the main thread; the caller owns cancellation
        log.debug("Interrupt handler not installed: %s", e)
