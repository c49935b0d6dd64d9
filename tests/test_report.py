import json

from boxpart.check import check_boxes
from boxpart.helpers import box
from boxpart.report import format_report, report_json

I = box(x=(0, 2), y=(0, 2))
LEFT = box(x=(0, 1), y=(0, 2))
RIGHT = box(x=(1, 2), y=(0, 2))


def test_text_report_for_a_partition() -> None:
    text = format_report(check_boxes(I, [LEFT, RIGHT]), "halves.json")
    lines = text.splitlines()
    assert lines[0].startswith("halves.json: prepartition of ")
    assert "(2 boxes)" in lines[0]
    assert "✓ Well-formed (0 errors)" in text
    assert "warning" not in text
    assert lines[-1].strip() == "Partition: yes"


def test_text_report_for_a_partial_cover() -> None:
    text = format_report(check_boxes(I, [LEFT]))
    assert text.startswith("prepartition of ")
    assert "(1 box)" in text
    assert "⚠ 1 warning" in text
    assert "[covers_root]" in text
    assert "(WARNING)" in text
    assert "Partition: no" in text


def test_text_report_lists_errors() -> None:
    bad = [LEFT, box(x=(0, 1), y=(0, 1)), box(x=(1, 3), y=(0, 1))]
    text = format_report(check_boxes(I, bad), "bad.json")
    assert "× Ill-formed (2 errors)" in text
    assert "[pairwise_disjoint]" in text
    assert "[box_le_root]" in text
    assert text.count("(ERROR)") == 2
    assert "Partition: no" in text


def test_json_report() -> None:
    overlap = box(x=(0, 1), y=(0, 1))
    report = report_json(check_boxes(I, [LEFT, RIGHT, overlap]))
    assert report["root"] == {"type": "box", "bounds": {"x": [0, 2], "y": [0, 2]}}
    assert report["box_count"] == 3
    assert report["well_formed"] is False
    assert report["is_partition"] is False
    assert report["error_count"] == 1
    assert report["warning_count"] == 0
    (diagnostic,) = report["diagnostics"]
    assert diagnostic["check"] == "pairwise_disjoint"
    assert diagnostic["severity"] == "error"
    assert len(diagnostic["boxes"]) == 2
    json.dumps(report)
