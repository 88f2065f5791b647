import pytest

from anneal.errors import InvalidInputError
from anneal.tour import Point, Tour
from tsp.tools.tour_io import format_tour, load_points, parse_points


def test_parse_points():
    points = parse_points("3\nA 0 0\nB 1.5 -2\nC 3e2 4\n")
    assert [p.name for p in points] == ["A", "B", "C"]
    assert points[1] == Point("B", 1.5, -2.0)
    assert points[2].x == 300.0


def test_parse_points_tolerates_blank_lines_and_spacing():
    points = parse_points("\n2\n\nA   0\t0\n  B 1 1  \n\n")
    assert [p.name for p in points] == ["A", "B"]


@pytest.mark.parametrize(
    "text",
    [
        "",
        "two\nA 0 0\nB 1 1\n",
        "0\n",
        "-1\n",
        "2 3\nA 0 0\n",
        "3\nA 0 0\nB 1 1\n",
        "1\nA 0 0\nB 1 1\n",
        "1\nA 0\n",
        "1\nA 0 0 extra\n",
        "1\nA zero 0\n",
        "1\nA nan 0\n",
        "2\nA 0 0\nA 1 1\n",
    ],
)
def test_parse_points_rejects_malformed(text):
    with pytest.raises(InvalidInputError):
        parse_points(text)


def test_error_mentions_line_number():
    with pytest.raises(InvalidInputError, match="第 3 行"):
        parse_points("2\nA 0 0\nB x 1\n")


def test_load_points(tmp_path):
    path = tmp_path / "cities.txt"
    path.write_text("2\nHome 0 0\nWork 3 4\n", encoding="utf-8")
    assert [p.name for p in load_points(path)] == ["Home", "Work"]


def test_load_points_missing_file(tmp_path):
    with pytest.raises(OSError):
        load_points(tmp_path / "missing.txt")


def test_format_tour_closes_cycle(square):
    assert format_tour(Tour.from_points(square)) == "A:B:C:D:A"


def test_format_single_city():
    assert format_tour(Tour((Point("Solo", 0.0, 0.0),))) == "Solo"


def test_load_points_non_utf8(tmp_path):
    path = tmp_path / "latin1.txt"
    path.write_bytes(b"2\nK\xf6ln 0 0\nB 1 1\n")
    with pytest.raises(InvalidInputError):
        load_points(path)
