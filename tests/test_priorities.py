from core.priorities import normalize_priority, priority_label, priority_options


def test_normalize_priority_clamps():
    assert normalize_priority(None) == 0
    assert normalize_priority("2") == 2
    assert normalize_priority(7) == 2
    assert normalize_priority(-1) == 0
    assert normalize_priority("high") == 0


def test_labels():
    assert priority_label(2, short=True) == "High"
    assert priority_label(99) == "High priority"
    assert list(priority_options()) == ["0", "1", "2"]
