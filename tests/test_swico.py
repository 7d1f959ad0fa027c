from datetime import date

import pytest

from qrslip.core.errors import SwicoSyntaxError
from qrslip.core.swico import SwicoS1, check_s1_syntax, parse_s1


EXAMPLE = "//S1/10/10201409/11/190512/20/1400.000-53/30/106017086/31/180508/32/7.7/40/2:10;0:30"


def test_parse_s1_splits_tags():
    values = parse_s1(EXAMPLE)
    assert values["10"] == "10201409"
    assert values["20"] == "1400.000-53"
    assert values["40"] == "2:10;0:30"
    assert list(values) == ["10", "11", "20", "30", "31", "32", "40"]


def test_example_has_no_syntax_problems():
    assert check_s1_syntax(EXAMPLE) == []


def test_swico_model_parse_and_format():
    """Test the structured model reads and writes the same string"""
    info = SwicoS1.parse(EXAMPLE)
    assert info.invoice_reference == "10201409"
    assert info.document_date == date(2019, 5, 12)
    assert info.vat_number == "106017086"
    assert info.vat_dates == (date(2018, 5, 8),)
    assert info.conditions == "2:10;0:30"
    assert info.to_string() == EXAMPLE


def test_escaping_of_free_text():
    """Test '/' and '\\' in references are escaped and restored"""
    info = SwicoS1(invoice_reference="2024/17", customer_reference="A\\B")
    text = info.to_string()
    assert text == "//S1/10/2024\\/17/20/A\\\\B"
    assert SwicoS1.parse(text) == info


def test_vat_date_range():
    info = SwicoS1(vat_dates=(date(2024, 1, 1), date(2024, 3, 31)))
    assert info.to_string() == "//S1/31/240101240331"
    assert SwicoS1.parse("//S1/31/240101240331").vat_dates == (date(2024, 1, 1), date(2024, 3, 31))


def test_empty_model_formats_to_empty_string():
    assert SwicoS1().to_string() == ""


@pytest.mark.parametrize(
    "text, fragment",
    [
        ("//S1/99/x", "unknown tag"),
        ("//S1/20/x/10/y", "ascending order"),
        ("//S1/10/x/10/y", "duplicate tag"),
        ("//S1/10", "alternate"),
        ("//S1/11/190230", "YYMMDD"),
        ("//S1/30/12345", "9 digits"),
        ("//S1/32/7,7", "decimals"),
        ("//S1/40/2:10.5", "whole days"),
        ("//S1/33/7.7", "groups"),
        ("/S1/10/x", "must start with"),
    ],
)
def test_syntax_problems(text, fragment):
    problems = check_s1_syntax(text)
    assert len(problems) == 1
    assert fragment in problems[0]


def test_parse_raises_with_problem_list():
    with pytest.raises(SwicoSyntaxError) as exc:
        SwicoS1.parse("//S1/30/12345/32/7,7")
    assert len(exc.value.problems) == 2


def test_invalid_model_cannot_be_formatted():
    with pytest.raises(SwicoSyntaxError):
        SwicoS1(vat_number="123").to_string()
