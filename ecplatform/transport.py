"""Two endpoints exchanging command, notification, request and response signals."""

from __future__ import annotations

import argparse
import asyncio
import enum
import logging
from typing import List, Optional, Sequence, Tuple

from .interrupt import Signal

_log = logging.getLogger(__name__)


class Key(enum.IntEnum):
    """OEM endpoint keys of the two parties."""

    SENDER = 0
    RECEIVER = 1


class Signals(enum.Enum):
    """Messages passed between the parties."""

    COMMAND = "command"
    REQUEST = "request"
    RESPONSE = "response"
    NOTIFICATION = "notification"


class Context:
    """An endpoint with a single-slot mailbox for the latest signal."""

    def __init__(self, key: Key) -> None:
        self.key = key
        self.signal: Signal[Signals] = Signal()

    def deliver(self, signal: Signals) -> None:
        """Accept a message; anything but a Signals member is rejected."""
        if not isinstance(signal, Signals):
            raise TypeError(f"endpoint {self.key.name} cannot handle {signal!r}")
        self.signal.signal(signal)


async def sender(
    this: Context, peer: Context, rounds: Optional[int] = None, delay: float = 2.0
) -> List[Signals]:
    """Command the peer, then answer its notifications and responses.

    Stops after `rounds` received signals if given; returns what was received.
    """
    received: List[Signals] = []
    await asyncio.sleep(delay)
    peer.deliver(Signals.COMMAND)

    while rounds is None or len(received) < rounds:
        sig = await this.signal.wait()
        received.append(sig)
        if sig is Signals.NOTIFICATION:
            _log.info("Sender: received notification!")
            await asyncio.sleep(delay)
            _log.info("Sender: requesting receiver!")
            peer.deliver(Signals.REQUEST)
        elif sig is Signals.RESPONSE:
            _log.info("Sender: got response!")
            await asyncio.sleep(delay)
            _log.info("Sender: commanding receiver!")
            peer.deliver(Signals.COMMAND)
        else:
            _log.info("Sender: Unexpected %s received!", sig.value)
    return received


async def receiver(
    this: Context, peer: Context, rounds: Optional[int] = None, delay: float = 2.0
) -> List[Signals]:
    """Answer commands with notifications and requests with responses.

    Stops after `rounds` received signals if given; returns what was received.
    """
    received: List[Signals] = []
    while rounds is None or len(received) < rounds:
        sig = await this.signal.wait()
        received.append(sig)
        if sig is Signals.COMMAND:
            _log.info("Receiver: Got command!")
            await asyncio.sleep(delay)
            _log.info("Receiver: Sending notification!")
            peer.deliver(Signals.NOTIFICATION)
        elif sig is Signals.REQUEST:
            _log.info("Receiver: Got Request!")
            await asyncio.sleep(delay)
            _log.info("Receiver: Sending reply!")
            peer.deliver(Signals.RESPONSE)
        else:
            _log.info("Receiver: Unexpected %s!", sig.value)
    return received


async def run_ping_pong(rounds: int = 4, delay: float = 0.0) -> Tuple[List[Signals], List[Signals]]:
    """Run sender and receiver for `rounds` signals each; return what each received."""
    if rounds < 0:
        raise ValueError("rounds must not be negative")
    sending = Context(Key.SENDER)
    receiving = Context(Key.RECEIVER)
    sent, got = await asyncio.gather(
        sender(sending, receiving, rounds, delay),
        receiver(receiving, sending, rounds, delay),
    )
    return sent, got


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the exchange and print the signals each side received."""
    parser = argparse.ArgumentParser(description="Exchange signals between two endpoints.")
    parser.add_argument("--rounds", type=int, default=4)
    parser.add_argument("--delay", type=float, default=0.1)
    args = parser.parse_args(argv)
    if args.rounds < 0 or args.delay < 0:
        parser.error("rounds and delay must not be negative")
    logging.basicConfig(level=logging.INFO, format="%(message)s")
    sent, got = asyncio.run(run_ping_pong(args.rounds, args.delay))
    print("Sender received: " + ", ".join(sig.value for sig in sent))
    print("Receiver received: " + ", ".join(sig.value for sig in got))
    return 0