from engine.classification import assign_class, classify_skus, sales_volume_by_sku

from conftest import make_history


def records_with_volumes(volumes: dict[str, int]):
    records = []
    for sku, total in volumes.items():
        # split each total over two days so grouping is exercised
        records += make_history(sku, [total // 2, total - total // 2])
    return records


def test_cumulative_share_boundaries():
    classes = classify_skus(records_with_volumes({"A": 50, "B": 30, "C": 10, "D": 5, "E": 5}))

    # cumulative shares: 0.50, 0.80, 0.90, 0.95, 1.00
    assert classes == {"A": "A", "B": "A", "C": "B", "D": "B", "E": "C"}


def test_every_sku_gets_exactly_one_class():
    volumes = {f"S{i:02d}": (i * 7) % 23 + 1 for i in range(30)}
    classes = classify_skus(records_with_volumes(volumes))

    assert set(classes) == set(volumes)
    assert set(classes.values()) <= {"A", "B", "C"}


def test_ties_broken_by_sku():
    forward = classify_skus(records_with_volumes({"X": 10, "Y": 10}))
    backward = classify_skus(records_with_volumes({"Y": 10, "X": 10}))

    assert forward == backward == {"X": "A", "Y": "C"}


def test_ranking_order():
    volume = sales_volume_by_sku(records_with_volumes({"b": 5, "a": 5, "c": 9}))
    assert volume["sku"].tolist() == ["c", "a", "b"]
    assert volume["cumulative_units"].tolist() == [9, 14, 19]


def test_zero_volume_leaves_classification_empty():
    assert classify_skus(make_history("A", [0, 0]) + make_history("B", [0])) == {}
    assert classify_skus([]) == {}


def test_assign_class_thresholds():
    assert assign_class(0.80) == "A"
    assert assign_class(0.8000001) == "B"
    assert assign_class(0.95) == "B"
    assert assign_class(0.96) == "C"
