from __future__ import annotations

__author__ = "Leonid Elkin, Mikhail Mikhailov"
__copyright__ = "Copyright (c) 2025 PySATL project"
__license__ = "SPDX-License-Identifier: MIT"

import json

import pytest

from pysatl_deltaq.distributions import CDF
from pysatl_deltaq.errors import NotMonotoneError, RecordError
from pysatl_deltaq.expressions.context import EvaluationContext
from pysatl_deltaq.expressions.delta_q import (
    BlackBox,
    Choice,
    ForAll,
    ForSome,
    Literal,
    Name,
    Seq,
    free_names,
)
from pysatl_deltaq.records import (
    cdf_from_record,
    cdf_to_record,
    context_from_record,
    context_to_record,
    dumps,
    expression_from_record,
    expression_to_record,
    loads,
    validate_record,
)


@pytest.fixture
def cdf() -> CDF:
    return CDF([0.0, 0.5, 1.0], bin_size=0.25)


class TestCdfRecords:
    def test_layout(self, cdf):
        assert cdf_to_record(cdf) == {"data": [0, 32767, 65535], "bin_size": 0.25}

    def test_decode(self, cdf):
        assert cdf_from_record({"data": [0, 32767, 65535], "bin_size": 0.25}) == cdf

    def test_integral_floats_are_accepted(self, cdf):
        assert cdf_from_record({"data": [0.0, 32767.0, 65535.0], "bin_size": 0.25}) == cdf

    @pytest.mark.parametrize(
        "record",
        [
            {"data": [0, 70000], "bin_size": 1.0},
            {"data": [0, 0.5], "bin_size": 1.0},
            {"data": [0, 1], "bin_size": 0},
            {"data": [0, 1]},
            {"data": [0, 1], "bin_size": 1.0, "extra": True},
            [0, 1],
        ],
        ids=["overflow", "fraction", "zero_bin", "missing_bin", "extra_key", "not_object"],
    )
    def test_rejects_malformed(self, record):
        with pytest.raises(RecordError, match="Invalid cdf record"):
            cdf_from_record(record)

    def test_rejects_decreasing(self):
        with pytest.raises(NotMonotoneError):
            cdf_from_record({"data": [0, 100, 50], "bin_size": 1.0})


class TestExpressionRecords:
    def test_tagged_layout(self, cdf):
        expr = Seq(Name("A"), Choice(Literal(cdf), 1, ForAll(Name("B"), BlackBox()), 2))
        assert expression_to_record(expr) == {
            "Seq": [
                {"Name": "A"},
                {
                    "Choice": [
                        {"CDF": {"data": [0, 32767, 65535], "bin_size": 0.25}},
                        1.0,
                        {"ForAll": [{"Name": "B"}, "BlackBox"]},
                        2.0,
                    ]
                },
            ]
        }

    def test_decode_every_variant(self, cdf):
        expr = ForSome(
            Seq(Name("A"), Literal(cdf)),
            Choice(ForAll(Name("B"), Name("C")), 0.25, BlackBox(), 0.75),
        )
        assert expression_from_record(expression_to_record(expr)) == expr

    def test_record_is_json_text(self, cdf):
        record = expression_to_record(ForAll(Name("A"), Literal(cdf)))
        assert json.loads(json.dumps(record)) == record

    @pytest.mark.parametrize(
        "record",
        [
            {"Name": 3},
            {"Seq": [{"Name": "A"}]},
            {"Choice": [{"Name": "A"}, "1", {"Name": "B"}, 1.0]},
            {"Loop": [{"Name": "A"}]},
            {"Name": "A", "Seq": [{"Name": "A"}, {"Name": "B"}]},
            "Black",
        ],
        ids=["name_type", "short_seq", "weight_type", "unknown_tag", "two_tags", "bad_string"],
    )
    def test_rejects_malformed(self, record):
        with pytest.raises(RecordError, match="Invalid expression record"):
            expression_from_record(record)

    def test_nested_errors_are_found(self):
        record = {"ForAll": [{"Name": "A"}, {"CDF": {"data": [0, -1], "bin_size": 1.0}}]}
        with pytest.raises(RecordError, match="Invalid expression record at ForAll/1"):
            expression_from_record(record)

    def test_deep_round_trip(self, cdf):
        expr = Literal(cdf)
        for i in range(1500):
            expr = Seq(expr, Name("hop")) if i % 2 else ForAll(Literal(cdf), expr)
        record = expression_to_record(expr)
        decoded = expression_from_record(record)
        assert str(decoded) == str(expr)
        assert free_names(decoded) == ["hop"]

    def test_deep_errors_are_located(self):
        record: dict = {"Name": 7}
        for _ in range(1200):
            record = {"ForSome": [{"Name": "a"}, record]}
        with pytest.raises(RecordError, match="ForSome/1/ForSome/1/"):
            expression_from_record(record)


class TestContextRecords:
    def test_round_trip_through_text(self, cdf):
        ctx = EvaluationContext(
            {"b": Seq(Name("a"), Name("a")), "a": Literal(cdf), "c": BlackBox()}
        )
        text = dumps(ctx)
        assert list(json.loads(text)) == ["a", "b", "c"]
        assert loads(text) == ctx

    def test_dumps_keeps_unicode_names(self):
        ctx = EvaluationContext({"ΔQ": Name("x")})
        assert "ΔQ" in dumps(ctx)
        assert '"ΔQ": {' in dumps(ctx, indent=1)

    def test_record_form(self, cdf):
        ctx = EvaluationContext({"a": Literal(cdf)})
        assert context_to_record(ctx) == {"a": {"CDF": cdf_to_record(cdf)}}
        assert context_from_record(context_to_record(ctx)) == ctx

    def test_loaded_context_evaluates(self):
        text = json.dumps(
            {
                "hop": {"CDF": {"data": [0, 65535, 65535], "bin_size": 1.0}},
                "out": {"Seq": [{"Name": "hop"}, {"Name": "hop"}]},
            }
        )
        assert loads(text).eval("out").data.tolist() == [0, 0, 65535]

    def test_invalid_json(self):
        with pytest.raises(RecordError, match="Invalid JSON"):
            loads("{not json")

    def test_undecodable_bytes(self):
        with pytest.raises(RecordError, match="Invalid JSON"):
            loads(b'{"a": "\xff"}')

    def test_invalid_binding(self):
        with pytest.raises(RecordError, match="Invalid context record at a"):
            loads('{"a": {"Nope": 1}}')

    def test_unknown_kind(self):
        with pytest.raises(ValueError, match="Unknown record kind"):
            validate_record({}, "graph")
