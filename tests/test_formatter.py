"""Tests for format_output across the three output modes."""

import json
from types import SimpleNamespace

import pytest

from wc_api_client.formatter import format_output
from wc_api_client.models import OutputMode


class TestMapMode:
    def test_object_to_dict(self) -> None:
        assert format_output(OutputMode.MAP, '{"id": 7, "status": "completed"}') == {
            "id": 7,
            "status": "completed",
        }

    def test_list_body(self) -> None:
        assert format_output(OutputMode.MAP, "[1, 2, 3]") == [1, 2, 3]

    def test_round_trip(self) -> None:
        """Encoding then formatting reproduces an equivalent structure."""
        data = {
            "orders": [
                {"id": 1, "total": "10.00", "line_items": [{"sku": "A", "qty": 2}]},
                {"id": 2, "total": "5.50", "note": None, "paid": True},
            ],
            "count": 2,
        }
        assert format_output(OutputMode.MAP, json.dumps(data)) == data

    def test_malformed_json_is_none(self) -> None:
        assert format_output(OutputMode.MAP, "<html>oops</html>") is None

    def test_empty_body_is_none(self) -> None:
        assert format_output(OutputMode.MAP, "") is None

    def test_mode_given_as_string(self) -> None:
        assert format_output("map", '{"a": 1}') == {"a": 1}


class TestObjectMode:
    def test_attribute_access(self) -> None:
        result = format_output(OutputMode.OBJECT, '{"order": {"id": 5, "status": "on-hold"}}')
        assert isinstance(result, SimpleNamespace)
        assert result.order.id == 5
        assert result.order.status == "on-hold"

    def test_objects_inside_lists(self) -> None:
        result = format_output(OutputMode.OBJECT, '{"errors": [{"code": "x", "message": "m"}]}')
        assert result.errors[0].code == "x"
        assert result.errors[0].message == "m"

    def test_malformed_json_is_none(self) -> None:
        assert format_output(OutputMode.OBJECT, "{not json") is None


class TestStringMode:
    @pytest.mark.parametrize("body", ['{"a": 1}', "not json", ""])
    def test_body_passed_through(self, body: str) -> None:
        assert format_output(OutputMode.STRING, body) == body


def test_unknown_mode_rejected() -> None:
    with pytest.raises(ValueError):
        format_output("xml", "{}")
