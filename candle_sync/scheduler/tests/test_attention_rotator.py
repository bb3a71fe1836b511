from collections import Counter

from candle_sync.scheduler.services.attention_rotator import AttentionRotator


def test_first_instrument_is_live_at_registration():
    rotator = AttentionRotator(["A", "B", "C"], rotation_period_seconds=5.0)

    assert rotator.live_instrument == "A"
    assert rotator.snapshot().index == 0


def test_four_rotations_follow_input_order():
    rotator = AttentionRotator(["A", "B", "C"], rotation_period_seconds=5.0)

    sequence = [rotator.rotate() for _ in range(4)]

    assert sequence == ["B", "C", "A", "B"]


def test_rotation_coverage():
    instruments = ["EURUSD_otc", "GBPUSD_otc", "USDJPY_otc", "AUDCAD_otc"]
    rotator = AttentionRotator(instruments)
    rotations = 11

    seen = Counter(rotator.rotate() for _ in range(rotations))

    for name in instruments:
        assert seen[name] >= rotations // len(instruments)


def test_order_is_supplied_order_not_alphabetical():
    rotator = AttentionRotator(["C", "A", "B"])

    assert [rotator.rotate() for _ in range(3)] == ["A", "B", "C"]


def test_empty_set_has_no_live_instrument_and_rotation_is_noop():
    rotator = AttentionRotator([])

    assert rotator.live_instrument is None
    assert rotator.rotate() is None
    assert rotator.snapshot().instruments == ()


def test_reconfigure_keeps_surviving_live_instrument():
    rotator = AttentionRotator(["A", "B", "C"])
    rotator.rotate()  # B live

    live = rotator.set_instruments(["D", "B", "E"])

    assert live == "B"
    assert rotator.rotate() == "E"
    assert rotator.rotate() == "D"


def test_reconfigure_without_live_instrument_falls_back_to_first():
    rotator = AttentionRotator(["A", "B", "C"])
    rotator.rotate()
    rotator.rotate()  # C live

    live = rotator.set_instruments(["X", "Y"])

    assert live == "X"
    assert rotator.live_instrument == "X"
    assert rotator.rotate() == "Y"


def test_reconfigure_to_empty_then_back():
    rotator = AttentionRotator(["A", "B"])

    assert rotator.set_instruments([]) is None
    assert rotator.rotate() is None
    assert rotator.set_instruments(["Q"]) == "Q"
    assert rotator.rotate() == "Q"
