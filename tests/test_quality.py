import pandas as pd

from engine.quality import DataQualityChecker


def test_missing_values_severity():
    df = pd.DataFrame({"sku": ["A", None, "C", "D"], "vendor": ["V", "V", "V", "V"]})
    report = DataQualityChecker("test").run(df)

    assert len(report.issues) == 1
    issue = report.issues[0]
    assert (issue.column, issue.issue_type, issue.count) == ("sku", "missing", 1)
    assert issue.severity == "critical"  # 25% blank


def test_range_and_summary():
    df = pd.DataFrame({"qty": ["1", "-2", "500", "x"]})
    report = DataQualityChecker("test").check_range("qty", min_val=0, max_val=100).run(df, dropped_rows=2)

    assert report.issues[0].count == 2
    assert report.issues[0].sample_values == ["-2", "500"]
    assert report.summary() == {
        "source": "test",
        "total_rows": 4,
        "dropped_rows": 2,
        "critical": 0,
        "warnings": 1,
        "info": 0,
    }


def test_checks_skip_missing_columns():
    df = pd.DataFrame({"a": [1]})
    report = (
        DataQualityChecker("test")
        .check_range("b", min_val=0)
        .check_duplicates(["b"])
        .check_unparsed("b", "b_parsed")
        .run(df)
    )
    assert report.issues == []


def test_empty_frame():
    report = DataQualityChecker("test").run(pd.DataFrame({"a": []}))
    assert report.total_rows == 0
    assert report.issues == []
