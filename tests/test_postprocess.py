import json

import pytest

from adcreative_genai.postprocess import (
    SCRIPT_PLACEHOLDER,
    format_poster_json,
    join_segments,
    parse_json_object,
    parse_script_segments,
    parse_stock_images,
    split_segments,
    strip_code_fences,
)


class TestCodeFences:
    @pytest.mark.parametrize(
        "raw",
        [
            "```\nA bright storefront\n```",
            "```markdown\nA bright storefront\n```",
            "  ```text\nA bright storefront```  ",
            "A bright storefront",
        ],
    )
    def test_fences_removed(self, raw):
        assert strip_code_fences(raw) == "A bright storefront"

    def test_idempotent(self):
        once = strip_code_fences("```json\n{\"a\": 1}\n```")
        assert strip_code_fences(once) == once

    def test_inner_backticks_survive(self):
        assert strip_code_fences("use `bold` here") == "use `bold` here"

    def test_none_is_empty(self):
        assert strip_code_fences(None) == ""


class TestJsonObject:
    def test_fenced_object(self):
        assert parse_json_object('```json\n{"businessName": "Ravi Sarees"}\n```') == {"businessName": "Ravi Sarees"}

    def test_invalid_json_keeps_raw(self):
        assert parse_json_object("not json") == {"raw": "not json"}

    def test_non_object_keeps_raw(self):
        assert parse_json_object("[1, 2]") == {"raw": "[1, 2]"}

    def test_empty_is_empty_dict(self):
        assert parse_json_object("  ") == {}


class TestPosterJson:
    def test_pretty_printed(self):
        out = format_poster_json('{"headline":"Diwali Sale","colors":["red"]}')
        assert out == json.dumps({"headline": "Diwali Sale", "colors": ["red"]}, indent=2)

    def test_non_ascii_preserved(self):
        assert "दीवाली" in format_poster_json('{"headline": "दीवाली"}')

    def test_invalid_returns_raw_text(self):
        assert format_poster_json("headline: Diwali Sale") == "headline: Diwali Sale"


class TestStockImages:
    def test_list_passthrough(self):
        data = [{"id": 1, "concept": "Shop front"}, {"id": 2, "concept": "Family"}]
        assert parse_stock_images(json.dumps(data)) == data

    def test_single_object_wrapped(self):
        assert parse_stock_images('{"id": 1}') == [{"id": 1}]

    def test_parse_error_marker(self):
        result = parse_stock_images("Here are some ideas")
        assert len(result) == 1
        assert result[0]["concept"] == "Parse Error"
        assert result[0]["prompt"] == "Here are some ideas"
        assert result[0]["usage"] == "Manual review needed"


class TestSegments:
    def test_split_drops_empty_parts(self):
        raw = "Segment one\n###SEGMENT###\n\n###SEGMENT###\nSegment two\n###SEGMENT###"
        assert split_segments(raw) == ["Segment one", "Segment two"]

    def test_split_without_separator_is_single(self):
        assert split_segments("only one") == ["only one"]

    def test_join_then_split(self):
        parts = ["first prompt", "second prompt"]
        assert split_segments(join_segments(parts)) == parts


class TestScriptSegments:
    def test_labelled_lines(self):
        script = (
            "Segment 1 (0-8s): Welcome to Ravi Sarees.\n"
            "The finest silk in town.\n"
            "Segment 2 (8-16s): Visit us this Diwali!"
        )
        assert parse_script_segments(script, 2) == [
            "Welcome to Ravi Sarees. The finest silk in town.",
            "Visit us this Diwali!",
        ]

    def test_case_insensitive_marker(self):
        assert parse_script_segments("SEGMENT 1: Hello there", 1) == ["Hello there"]

    def test_count_mismatch_is_logged(self, caplog):
        with caplog.at_level("WARNING", logger="adcreative_genai"):
            result = parse_script_segments("Segment 1: only one", 4)
        assert result == ["only one"]
        assert "expected 4" in caplog.text

    def test_unlabelled_script_falls_back_to_whole_text(self, caplog):
        with caplog.at_level("WARNING", logger="adcreative_genai"):
            result = parse_script_segments("Come shop with us today.", 2)
        assert result == ["Come shop with us today."]
        assert "fallback" in caplog.text

    def test_empty_script_gives_placeholders(self):
        assert parse_script_segments("", 3) == [SCRIPT_PLACEHOLDER] * 3


def test_malformed_json_is_reported_as_malformed_response():
    from adcreative_genai.errors import MalformedResponseError
    from adcreative_genai.postprocess import _loads

    with pytest.raises(MalformedResponseError):
        _loads("{broken")
