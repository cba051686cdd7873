from app.utils.formatting import format_currency, format_number, format_percentage


def test_format_number():
    assert format_number(1234.5) == "1,234.5"
    assert format_number(2650.0) == "2,650"
    assert format_number(23.3333) == "23.33"
    assert format_number(-0.001) == "0"
    assert format_number(None) == "0"
    assert format_number(float("nan")) == "0"


def test_format_currency():
    assert format_currency(1234.5) == "$1,234.50"
    assert format_currency(-3.5) == "-$3.50"
    assert format_currency(None) == "$0.00"


def test_format_percentage():
    assert format_percentage(0.125) == "12.5%"
    assert format_percentage(-0.19) == "-19.0%"
    assert format_percentage(None) == "0%"
