"""Poll groups: periodic batched reads from a PLC on behalf of many requesters."""

from __future__ import annotations

import logging
import threading
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable

from s7device.plc_address import PlcAddress

__all__ = [
    "DEFAULT_PRIORITY",
    "ReadItem",
    "PollRequester",
    "PollService",
    "PollGroup",
    "PollGroupRegistry",
    "configure_poll_group",
    "start_poll_groups",
]

_log = logging.getLogger(__name__)

DEFAULT_PRIORITY = 50
"""Priority used when none (or a non-positive one) is given."""

_MAX_CATCH_UP_DELAY = 0.1


@dataclass
class ReadItem:
    """One read of ``size`` bytes at ``address``; the reader fills ``data`` and ``ok``."""

    address: PlcAddress
    size: int
    data: bytes = b""
    ok: bool = True

    @property
    def succeeded(self) -> bool:
        return self.ok and len(self.data) == self.size


Reader = Callable[[list[ReadItem]], None]


class PollRequester(ABC):
    """Something that registers with a poll group to have data read periodically."""

    @abstractmethod
    def prepare_request(self, service: PollService) -> None:
        """Queue this cycle's reads through ``service``."""

    @abstractmethod
    def process_response(self, succeeded: bool, buffer: bytes) -> None:
        """Receive the outcome of one queued read, in the order they were queued."""


class PollService:
    """Collects the reads a requester queues during one poll cycle."""

    def __init__(self) -> None:
        self.requests: list[tuple[PlcAddress, int]] = []

    def request_read(self, address: PlcAddress, size: int) -> None:
        """Queue a read of ``size`` bytes starting at ``address``."""
        if size < 0:
            raise ValueError("read size must not be negative")
        self.requests.append((address, size))


class PollGroup:
    """Periodically reads the items of all registered requesters in one batch."""

    def __init__(
        self,
        port_name: str,
        name: str,
        polling_interval: float,
        reader: Reader,
        priority: int = DEFAULT_PRIORITY,
    ) -> None:
        if polling_interval <= 0:
            raise ValueError("polling interval must be positive")
        self.port_name = port_name
        self.name = name
        self.polling_interval = float(polling_interval)
        self.priority = priority
        self._reader = reader
        self._lock = threading.Lock()
        self._requesters: dict[PollRequester, None] = {}
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

    def __repr__(self) -> str:
        return (
            f"PollGroup(port_name={self.port_name!r}, name={self.name!r}, "
            f"polling_interval={self.polling_interval!r})"
        )

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def register_requester(self, requester: PollRequester) -> None:
        """Have ``requester`` take part in every following poll cycle."""
        with self._lock:
            self._requesters[requester] = None

    def unregister_requester(self, requester: PollRequester) -> None:
        """Remove ``requester``; a cycle already under way may still call it."""
        with self._lock:
            self._requesters.pop(requester, None)

    def process(self) -> None:
        """Run one poll cycle: gather requests, read them, hand back the results."""
        with self._lock:
            requesters = list(self._requesters)
        if not requesters:
            return

        requests: list[tuple[ReadItem, PollRequester]] = []
        for requester in requesters:
            service = PollService()
            requester.prepare_request(service)
            requests.extend(
                (ReadItem(address, size), requester)
                for address, size in service.requests
            )

        overall_ok = True
        items = [item for item, _ in requests]
        if items:
            try:
                self._reader(items)
            except Exception:
                _log.exception(
                    'port "%s" poll group "%s": reading %d items failed',
                    self.port_name,
                    self.name,
                    len(items),
                )
                overall_ok = False

        # Every requester hears back, even on failure.
        for item, requester in requests:
            requester.process_response(overall_ok and item.succeeded, bytes(item.data))

    def _run(self) -> None:
        delay = self.polling_interval
        while not self._stop_event.wait(delay):
            began = time.monotonic()
            try:
                self.process()
            except Exception:
                _log.exception(
                    'port "%s" poll group "%s": poll cycle failed',
                    self.port_name,
                    self.name,
                )
            consumed = time.monotonic() - began
            delay = self.polling_interval - consumed
            if delay <= 0:
                delay = min(self.polling_interval, _MAX_CATCH_UP_DELAY)

    def start(self) -> None:
        """Start polling in a background thread; the first cycle runs after one interval."""
        if self.running:
            return
        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._run,
            name=f"poll-{self.port_name}-{self.name}",
            daemon=True,
        )
        self._thread.start()

    def stop(self) -> None:
        """Stop polling and wait for the background thread to finish."""
        self._stop_event.set()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join()
        self._thread = None


class PollGroupRegistry:
    """Poll groups keyed by port name and group name."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._groups: dict[tuple[str, str], PollGroup] = {}
        self._started = False

    def create(
        self,
        port_name: str,
        name: str,
        polling_interval: float,
        reader: Reader,
        priority: int = DEFAULT_PRIORITY,
    ) -> PollGroup:
        """Create and register a poll group; a duplicate name for a port raises ValueError."""
        key = (port_name, name)
        with self._lock:
            if key in self._groups:
                raise ValueError(
                    f'duplicate definition of poll group "{name}" for port "{port_name}"'
                )
            group = PollGroup(port_name, name, polling_interval, reader, priority)
            self._groups[key] = group
            return group

    def find(self, port_name: str, name: str) -> PollGroup | None:
        """Return the named poll group of a port, or None."""
        with self._lock:
            return self._groups.get((port_name, name))

    def start_all(self) -> None:
        """Start every registered group; later calls do nothing until stop_all."""
        with self._lock:
            if self._started:
                return
            for group in self._groups.values():
                group.start()
            self._started = True

    def stop_all(self) -> None:
        """Stop every registered group."""
        with self._lock:
            groups = list(self._groups.values())
            self._started = False
        for group in groups:
            group.stop()


_default_registry = PollGroupRegistry()


def configure_poll_group(
    port_name: str,
    name: str,
    polling_interval: float,
    reader: Reader,
    priority: int = 0,
) -> PollGroup:
    """Create a poll group in the shared registry; a non-positive priority means the default."""
    if priority <= 0:
        priority = DEFAULT_PRIORITY
    return _default_registry.create(port_name, name, polling_interval, reader, priority)


def start_poll_groups() -> None:
    """Start all poll groups of the shared registry."""
    _default_registry.start_all()