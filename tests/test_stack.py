import pytest

from msxdbg.connection import debug_read_command
from msxdbg.stack import StackRequest, StackView

SP = 0xF000


@pytest.fixture
def setup():
    sent = []
    view = StackView(sent.append, 8.0)
    memory = bytearray(0x10000)
    view.set_data(memory)
    return view, sent, memory


def answer(request, data):
    request.reply_ok(bytes(data).hex().upper())


def test_set_stack_pointer_sends_one_request(setup):
    view, sent, _ = setup
    view.set_stack_pointer(SP)
    assert len(sent) == 1
    req = sent[0]
    assert isinstance(req, StackRequest)
    assert req.offset == SP
    assert req.command == debug_read_command("memory", SP, 16)
    assert view.waiting_for_data
    assert view.scroll_value == SP


def test_scroll_range_invariants(setup):
    view, _, memory = setup
    view.set_stack_pointer(SP)
    rng = view.scroll_range()
    assert rng.minimum == SP
    assert rng.single_step == 2
    assert rng.page_step == 16
    assert rng.maximum + rng.page_step == len(memory)


def test_reply_fills_memory_and_lines(setup):
    view, sent, memory = setup
    view.set_stack_pointer(SP)
    data = bytes(range(16))
    answer(sent[0], data)
    assert memory[SP : SP + 16] == data
    assert not view.waiting_for_data
    lines = view.lines()
    assert len(lines) == 8
    assert lines[0] == (SP, 0x0100)
    assert [a for a, _ in lines] == list(range(SP, SP + 16, 2))
    assert all(w == memory[a] | memory[a + 1] << 8 for a, w in lines)


def test_location_ignored_while_waiting(setup):
    view, sent, _ = setup
    view.set_stack_pointer(SP)
    view.set_location(SP + 8)
    assert len(sent) == 1


def test_cancel_clears_waiting(setup):
    view, sent, _ = setup
    view.set_stack_pointer(SP)
    sent[0].cancel()
    assert not view.waiting_for_data
    view.set_location(SP + 4)
    assert sent[-1].offset == SP + 4


def test_scroll_wheel_moves_view(setup):
    view, sent, _ = setup
    view.set_stack_pointer(SP)
    answer(sent[0], bytes(16))
    view.scroll(-120)
    assert view.scroll_value == SP + 3
    assert sent[-1].offset == SP + 2


def test_scroll_clamped_at_stack_pointer(setup):
    view, sent, _ = setup
    view.set_stack_pointer(SP)
    answer(sent[0], bytes(16))
    view.scroll(400)
    assert view.scroll_value == SP
    assert len(sent) == 1


def test_wheel_remainder_accumulates(setup):
    view, sent, _ = setup
    view.set_stack_pointer(SP)
    answer(sent[0], bytes(16))
    view.scroll(-30)
    assert view.scroll_value == SP
    view.scroll(-30)
    assert view.scroll_value == SP + 1


def test_refetch_when_scrolled_during_transfer(setup):
    view, sent, _ = setup
    view.set_stack_pointer(SP)
    view.scroll(-80)
    assert view.scroll_value == SP + 2
    assert len(sent) == 1
    answer(sent[0], bytes(16))
    assert len(sent) == 2
    assert sent[1].offset == SP + 2


def test_request_truncated_at_end_of_memory(setup):
    view, sent, memory = setup
    view.set_stack_pointer(SP)
    answer(sent[0], bytes(16))
    view.set_location(len(memory) - 8)
    req = sent[-1]
    assert req.offset + req.size == len(memory)


def test_odd_stack_pointer_keeps_parity(setup):
    view, sent, _ = setup
    view.set_stack_pointer(SP + 1)
    assert sent[0].offset % 2 == 1


def test_set_location_without_memory():
    view = StackView(lambda cmd: None, 4.0)
    with pytest.raises(RuntimeError):
        view.set_location(0)