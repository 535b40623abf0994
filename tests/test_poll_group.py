import threading
import uuid

import pytest

from s7device.plc_address import PlcAddress
from s7device.poll_group import (
    DEFAULT_PRIORITY,
    PollGroup,
    PollGroupRegistry,
    PollRequester,
    PollService,
    ReadItem,
    configure_poll_group,
    start_poll_groups,
)


class Recorder(PollRequester):
    def __init__(self, reads):
        self.reads = reads
        self.responses = []
        self.event = threading.Event()

    def prepare_request(self, service):
        for address, size in self.reads:
            service.request_read(address, size)

    def process_response(self, succeeded, buffer):
        self.responses.append((succeeded, buffer))
        self.event.set()


def filling_reader(calls):
    def reader(items):
        calls.append(list(items))
        for item in items:
            item.data = bytes([item.address.start_byte]) * item.size

    return reader


def unique():
    return uuid.uuid4().hex


def test_process_without_requesters_does_not_read():
    calls = []
    group = PollGroup("port", "fast", 1.0, filling_reader(calls))
    group.process()
    assert calls == []


def test_responses_follow_request_order():
    calls = []
    group = PollGroup("port", "fast", 1.0, filling_reader(calls))
    first = Recorder([(PlcAddress.parse("DB1.DBW4"), 2), (PlcAddress.parse("MB7"), 1)])
    second = Recorder([(PlcAddress.parse("IW2"), 3)])
    group.register_requester(first)
    group.register_requester(second)
    group.process()
    assert len(calls) == 1
    assert [item.address for item in calls[0]] == [
        PlcAddress.parse("DB1.DBW4"),
        PlcAddress.parse("MB7"),
        PlcAddress.parse("IW2"),
    ]
    assert first.responses == [(True, b"\x04\x04"), (True, b"\x07")]
    assert second.responses == [(True, b"\x02\x02\x02")]


def test_item_marked_not_ok_fails_only_that_item():
    def reader(items):
        for item in items:
            item.data = b"\x00" * item.size
        items[0].ok = False

    group = PollGroup("port", "g", 1.0, reader)
    requester = Recorder([(PlcAddress.parse("MB0"), 1), (PlcAddress.parse("MB1"), 1)])
    group.register_requester(requester)
    group.process()
    assert [ok for ok, _ in requester.responses] == [False, True]


def test_short_read_is_a_failure():
    def reader(items):
        for item in items:
            item.data = b"\x01"

    group = PollGroup("port", "g", 1.0, reader)
    requester = Recorder([(PlcAddress.parse("MW0"), 2)])
    group.register_requester(requester)
    group.process()
    assert requester.responses == [(False, b"\x01")]


def test_reader_error_fails_every_item_but_still_responds():
    def reader(items):
        raise OSError("connection lost")

    group = PollGroup("port", "g", 1.0, reader)
    requester = Recorder([(PlcAddress.parse("MB0"), 1), (PlcAddress.parse("MB1"), 1)])
    group.register_requester(requester)
    group.process()
    assert [ok for ok, _ in requester.responses] == [False, False]


def test_unregistered_requester_is_not_asked():
    calls = []
    group = PollGroup("port", "g", 1.0, filling_reader(calls))
    requester = Recorder([(PlcAddress.parse("MB0"), 1)])
    group.register_requester(requester)
    group.register_requester(requester)
    group.process()
    assert len(requester.responses) == 1
    group.unregister_requester(requester)
    group.unregister_requester(requester)
    group.process()
    assert len(requester.responses) == 1
    assert len(calls) == 1


def test_service_collects_and_validates_requests():
    service = PollService()
    address = PlcAddress.parse("QB3")
    service.request_read(address, 4)
    assert service.requests == [(address, 4)]
    with pytest.raises(ValueError):
        service.request_read(address, -1)


def test_read_item_success_requires_full_data():
    item = ReadItem(PlcAddress.parse("MB0"), 2)
    assert item.succeeded is False
    item.data = b"ab"
    assert item.succeeded is True


def test_non_positive_interval_rejected():
    with pytest.raises(ValueError):
        PollGroup("port", "g", 0, filling_reader([]))


def test_registry_create_find_and_duplicate():
    registry = PollGroupRegistry()
    group = registry.create("port", "slow", 2.0, filling_reader([]), 10)
    assert registry.find("port", "slow") is group
    assert registry.find("other", "slow") is None
    assert group.priority == 10
    with pytest.raises(ValueError):
        registry.create("port", "slow", 1.0, filling_reader([]))


def test_started_group_polls_periodically():
    calls = []
    registry = PollGroupRegistry()
    group = registry.create("port", "fast", 0.01, filling_reader(calls))
    requester = Recorder([(PlcAddress.parse("MB5"), 1)])
    group.register_requester(requester)
    registry.start_all()
    try:
        assert requester.event.wait(5.0)
        assert group.running is True
    finally:
        registry.stop_all()
    assert group.running is False
    assert requester.responses[0] == (True, b"\x05")


def test_start_all_only_once_until_stopped():
    registry = PollGroupRegistry()
    first = registry.create("port", "a", 10.0, filling_reader([]))
    registry.start_all()
    try:
        late = registry.create("port", "b", 10.0, filling_reader([]))
        registry.start_all()
        assert first.running is True
        assert late.running is False
    finally:
        registry.stop_all()
    assert first.running is False


def test_configure_poll_group_uses_default_priority():
    port = unique()
    group = configure_poll_group(port, "g", 10.0, filling_reader([]), 0)
    assert group.priority == DEFAULT_PRIORITY
    other = configure_poll_group(port, "h", 10.0, filling_reader([]), 7)
    assert other.priority == 7
    with pytest.raises(ValueError):
        configure_poll_group(port, "g", 10.0, filling_reader([]))


def test_start_poll_groups_starts_configured_group():
    group = configure_poll_group(unique(), "g", 0.01, filling_reader([]))
    requester = Recorder([(PlcAddress.parse("MB9"), 1)])
    group.register_requester(requester)
    start_poll_groups()
    try:
        assert requester.event.wait(5.0)
    finally:
        group.stop()
    assert requester.responses[0] == (True, b"\x09")