"""Mock eSPI and battery services passing battery status and charge requests."""

from __future__ import annotations

import argparse
import asyncio
import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from .interrupt import Signal

_log = logging.getLogger(__name__)


@dataclass(frozen=True)
class UpdateBatteryStatus:
    """Battery status to be written into the host memory map."""

    status: int


@dataclass(frozen=True)
class SetBatteryCharge:
    """A host request to set the battery charge."""

    charge: int


class EspiService:
    """The host transport: receives battery status updates and forwards host requests."""

    def __init__(self) -> None:
        self.signal: Signal[UpdateBatteryStatus] = Signal()

    def receive(self, message: UpdateBatteryStatus) -> None:
        """Accept a status update; other messages are rejected."""
        if not isinstance(message, UpdateBatteryStatus):
            raise TypeError(f"eSPI service cannot handle {message!r}")
        self.signal.signal(message)

    def forward_set_battery_charge(self, battery: "BatteryService", charge: int) -> None:
        """Forward a host charge request to the battery service."""
        battery.receive(SetBatteryCharge(charge))

    async def run(self, count: Optional[int] = None) -> List[UpdateBatteryStatus]:
        """Apply status updates to the memory map; stop after `count` if given."""
        handled: List[UpdateBatteryStatus] = []
        while count is None or len(handled) < count:
            message = await self.signal.wait()
            _log.info("Update battery status in memory map")
            handled.append(message)
        return handled


class BatteryService:
    """The battery: publishes status periodically and takes charge requests."""

    def __init__(self) -> None:
        self.signal: Signal[SetBatteryCharge] = Signal()

    def receive(self, message: SetBatteryCharge) -> None:
        """Accept a charge request; other messages are rejected."""
        if not isinstance(message, SetBatteryCharge):
            raise TypeError(f"battery service cannot handle {message!r}")
        self.signal.signal(message)

    async def update(self, espi: EspiService, count: Optional[int] = None, interval: float = 1.0) -> int:
        """Send a status update every interval; stop after `count` if given; return how many."""
        sent = 0
        while count is None or sent < count:
            espi.receive(UpdateBatteryStatus(0))
            _log.info("Sending updated battery status to espi service")
            sent += 1
            await asyncio.sleep(interval)
        return sent

    async def run_config(self, count: Optional[int] = None) -> List[int]:
        """Apply charge requests; stop after `count` if given; return the charges set."""
        charges: List[int] = []
        while count is None or len(charges) < count:
            message = await self.signal.wait()
            _log.info("Set battery charge %d", message.charge)
            charges.append(message.charge)
        return charges


async def run_mock_espi(ticks: int = 3, interval: float = 1.0) -> Tuple[List[UpdateBatteryStatus], List[int]]:
    """Run both services for `ticks` exchanges; return the status updates and charges seen."""
    if ticks < 0:
        raise ValueError("ticks must not be negative")
    espi = EspiService()
    battery = BatteryService()

    async def host_requests() -> None:
        # Stands in for an interrupt that sets the battery charge every interval.
        for charge in range(1, ticks + 1):
            await asyncio.sleep(interval)
            espi.forward_set_battery_charge(battery, charge)

    updates, _, charges, _ = await asyncio.gather(
        espi.run(ticks),
        battery.update(espi, ticks, interval),
        battery.run_config(ticks),
        host_requests(),
    )
    return updates, charges


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the mock services and print what they exchanged."""
    parser = argparse.ArgumentParser(description="Run mock eSPI and battery services.")
    parser.add_argument("--ticks", type=int, default=3)
    parser.add_argument("--interval", type=float, default=0.1)
    args = parser.parse_args(argv)
    if args.ticks < 0 or args.interval < 0:
        parser.error("ticks and interval must not be negative")
    logging.basicConfig(level=logging.INFO, format="%(message)s")
    updates, charges = asyncio.run(run_mock_espi(args.ticks, args.interval))
    print(f"Status updates: {len(updates)}")
    print("Charges set: " + ", ".join(str(charge) for charge in charges))
    return 0