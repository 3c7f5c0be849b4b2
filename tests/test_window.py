import pytest

from seccompscan.window import InstructionWindow, LOOKBACK_WINDOW_SIZE


def test_default_capacity():
    window = InstructionWindow()
    assert window.capacity == LOOKBACK_WINDOW_SIZE == 15
    assert len(window) == 0


@pytest.mark.parametrize("total", [1, 14, 15, 16, 40])
def test_lookup_returns_instruction_k_steps_back(total):
    window = InstructionWindow()
    for i in range(total):
        assert window.append(f"ins {i}") == i

    last = window.position - 1
    for k in range(min(total, LOOKBACK_WINDOW_SIZE - 1)):
        assert window.at(last - k) == f"ins {last - k}"


def test_wraparound_overwrites_oldest():
    window = InstructionWindow(capacity=3)
    for i in range(5):
        window.append(str(i))

    assert [window.at(p) for p in (2, 3, 4)] == ["2", "3", "4"]
    # position 1 shares its slot with position 4
    assert window.at(1) == "4"
    assert len(window) == 3


def test_unwritten_slots_read_empty():
    window = InstructionWindow()
    window.append("MOVQ $0x1, 0(SP)")
    window.append("CALL syscall.Syscall(SB)")

    for k in range(2, LOOKBACK_WINDOW_SIZE):
        assert window.at(1 - k) == ""


def test_capacity_must_be_positive():
    with pytest.raises(ValueError):
        InstructionWindow(capacity=0)
