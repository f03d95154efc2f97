from decimal import Decimal

import pytest

from finance_tracker.config import load_config
from finance_tracker.core.models import Record
from finance_tracker.store import SectionedRecordStore
from finance_tracker.trackers import SCHEMAS, get_tracker, monthly_summary


def make_config(tmp_path, **overrides):
    cfg = load_config(None)
    cfg['data_file'] = str(tmp_path / 'all_in_one.txt')
    cfg.update(overrides)
    return cfg


def test_trackers_share_one_file(tmp_path):
    cfg = make_config(tmp_path)
    income = get_tracker('income', cfg)
    expense = get_tracker('expense', cfg)
    transactions = get_tracker('transactions', cfg)

    income.add('2025-05-01', 'Salary', 2000, 'pay')
    expense.add('2025-05-02', 'Food', '12.5', 'lunch')
    transactions.add('2025-05-03', 'Transfer', 200, 'From checking to savings')

    text = (tmp_path / 'all_in_one.txt').read_text()
    assert '[Income]' in text and '[Expense]' in text and '[Transactions]' in text
    assert list(expense.lines()) == ['2025-05-02 | Food | 12.50 | lunch']
    assert income.entries() == [Record('2025-05-01', 'Salary', Decimal('2000'), 'pay')]


def test_tracker_delete_and_totals(tmp_path):
    cfg = make_config(tmp_path)
    expense = get_tracker('expense', cfg)
    expense.add('2025-07-20', 'Repair', 200, 'repaire the car')
    expense.add('2025-07-21', 'Food', 15, 'lunch')

    assert expense.total_for_month('2025-07') == Decimal('215.00')
    assert expense.total_for_month('2025-07', 'repair') == Decimal('200.00')

    assert expense.delete('2025-07-20', 'Repair', 200, 'repaire the car')
    assert not expense.delete('2025-07-20', 'Repair', 200, 'repaire the car')
    assert expense.total_for_month('2025-07') == Decimal('15.00')


def test_section_override_from_config(tmp_path):
    cfg = make_config(tmp_path, sections={'expense': 'Spending'})
    tracker = get_tracker('expense', cfg)
    tracker.add('2025-07-01', 'Food', 1, 'tea')

    assert tracker.section == 'Spending'
    assert '[Spending]' in (tmp_path / 'all_in_one.txt').read_text()
    assert tracker.schema.field_labels == ('date', 'type', 'amount', 'description')


def test_income_labels_source():
    assert SCHEMAS['income'].field_labels[1] == 'source'


def test_unknown_tracker(tmp_path):
    with pytest.raises(ValueError):
        get_tracker('savings', make_config(tmp_path))


def test_monthly_summary(tmp_path):
    cfg = make_config(tmp_path)
    get_tracker('income', cfg).add('2025-05-01', 'Salary', 2000, 'pay')
    get_tracker('expense', cfg).add('2025-05-02', 'Food', '120.25', 'groceries')
    get_tracker('expense', cfg).add('2025-06-02', 'Food', 5, 'next month')
    get_tracker('transactions', cfg).add('2025-05-03', 'Transfer', 300, 'savings')

    result = monthly_summary(cfg, '2025-05')

    assert result['income'] == Decimal('2000.00')
    assert result['expense'] == Decimal('120.25')
    assert result['transactions'] == Decimal('300.00')
    assert result['net'] == Decimal('1879.75')


def test_monthly_summary_accepts_store(tmp_path):
    other = tmp_path / 'other.txt'
    other.write_text('[Income]\n2025-05-01 | Salary | 10.00 | pay\n')
    cfg = make_config(tmp_path)

    result = monthly_summary(cfg, '2025-05', store=SectionedRecordStore(other))

    assert result['income'] == Decimal('10.00')
    assert result['net'] == Decimal('10.00')
    assert not (tmp_path / 'all_in_one.txt').exists()
