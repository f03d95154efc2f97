from decimal import Decimal

import pytest

from finance_tracker.core.models import Record, format_amount
from finance_tracker.core.validation import (
    validate_amount,
    validate_date,
    validate_email,
    validate_month,
    validate_name,
    validate_password,
)


def test_valid_inputs():
    assert validate_name('Alice')
    assert validate_email('alice@example.com')
    assert validate_password('x')
    assert validate_date('2025-02-28')
    assert validate_month('2025-12')
    assert validate_amount('12.34')


@pytest.mark.parametrize(
    'check, value, reason',
    [
        (validate_name, '   ', 'Name cannot be empty.'),
        (validate_email, '', 'Email cannot be empty.'),
        (validate_password, '', 'Password cannot be empty.'),
    ],
)
def test_empty_inputs_report_reason(check, value, reason):
    result = check(value)
    assert not result.ok
    assert result.reason == reason


def test_invalid_inputs():
    assert not validate_email('alice')
    assert not validate_date('2025-02-30')
    assert not validate_date('07/01/2025')
    assert not validate_month('2025-13')
    assert not validate_month('2025-7')
    assert not validate_amount('N/A')
    assert not validate_amount('NaN')


def test_record_canonical_form():
    record = Record('2025-07-01', 'Food', Decimal('10.005'), 'lunch')
    assert record.canonical() == '2025-07-01 | Food | 10.01 | lunch'
    assert str(record) == record.canonical()
    assert format_amount(Decimal('-3')) == '-3.00'


def test_record_parse_keeps_pipes_in_description():
    line = '2025-07-01 | Food | 1.00 | a | b'
    record = Record.parse(line)
    assert record.description == 'a | b'
    assert record.canonical() == line
    assert Record.parse('2025-07-01 | Food | 1.00') is None


def test_record_parse_rejects_bracketed_date():
    assert Record.parse('  [x] | Food | 1.00 | y') is None
