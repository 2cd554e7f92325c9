"""Tests for insertion validation and the shared timestamp format."""

import pytest
from datetime import datetime
from decimal import Decimal

from smart_finance.models.transaction import TransactionRecord
from smart_finance.utils.timestamps import (
    format_timestamp,
    is_valid_timestamp,
    parse_timestamp,
    try_parse_timestamp,
)
from smart_finance.validation import TransactionValidator, to_decimal


class TestTimestamps:
    """Tests for the yyyy/MM/dd HH:mm format."""

    def test_parse_and_format(self):
        """Test parsing and formatting agree."""
        ts = parse_timestamp("2024/05/18 10:00")
        assert ts == datetime(2024, 5, 18, 10, 0)
        assert format_timestamp(ts) == "2024/05/18 10:00"

    @pytest.mark.parametrize("value", [
        "2024-05-18 10:00",
        "2024/05/18",
        "2024/5/18 10:00",
        "2024/05/18 9:00",
        "2024/13/01 10:00",
        "2024/05/18 10:00:00",
        "",
    ])
    def test_rejects_other_formats(self, value):
        """Test that only the exact zero-padded format is accepted."""
        assert is_valid_timestamp(value) is False

    def test_try_parse_none(self):
        """Test that None is simply not parseable."""
        assert try_parse_timestamp(None) is None


class TestToDecimal:
    """Tests for amount coercion."""

    def test_numbers_and_strings(self):
        assert to_decimal(500.0) == Decimal("500.0")
        assert to_decimal(-1) == Decimal("-1")
        assert to_decimal(" 12.5 ") == Decimal("12.5")
        assert to_decimal(Decimal("3.10")) == Decimal("3.10")

    def test_not_a_number(self):
        assert to_decimal(None) is None
        assert to_decimal("abc") is None
        assert to_decimal(True) is None


class TestTransactionValidator:
    """Tests for the add-request rules."""

    def setup_method(self):
        self.validator = TransactionValidator()

    def test_valid_request(self):
        """Test a request that satisfies every rule."""
        result = self.validator.validate_request("user1", "Income", 500.0, "2024/05/17 13:00")
        assert result.is_valid
        assert result.issues == []

    @pytest.mark.parametrize("operation", [
        "Income", "Expense", "Transfer In", "Transfer Out", "Deposit",
    ])
    def test_every_recognized_operation(self, operation):
        """Test each recognized kind is accepted."""
        assert self.validator.validate_request("user1", operation, 1, "2024/05/17 13:00").is_valid

    @pytest.mark.parametrize("username,operation,amount,timestamp,field", [
        (None, "Income", 500.0, "2024/05/17 13:00", "account_username"),
        ("", "Income", 500.0, "2024/05/17 13:00", "account_username"),
        ("user1", "Other", 500.0, "2024/05/17 13:00", "operation"),
        ("user1", "income", 500.0, "2024/05/17 13:00", "operation"),
        ("user1", None, 500.0, "2024/05/17 13:00", "operation"),
        ("user1", "Income", -1, "2024/05/17 13:00", "amount"),
        ("user1", "Income", 0, "2024/05/17 13:00", "amount"),
        ("user1", "Income", "NaN", "2024/05/17 13:00", "amount"),
        ("user1", "Income", "ten", "2024/05/17 13:00", "amount"),
        ("user1", "Income", 100, None, "timestamp"),
        ("user1", "Income", 100, "17/05/2024 13:00", "timestamp"),
    ])
    def test_rejections(self, username, operation, amount, timestamp, field):
        """Test that each rule rejects on its own field."""
        result = self.validator.validate_request(username, operation, amount, timestamp)
        assert not result.is_valid
        assert result.fields_with_errors() == [field]

    def test_reports_every_issue(self):
        """Test that validation does not stop at the first problem."""
        result = self.validator.validate_request(None, "Other", -1, None)
        assert result.error_count == 4

    @pytest.mark.parametrize("field,value", [
        ("merchant", "shop\nline"),
        ("type", "Income\r"),
        ("remark", "a\rb"),
        ("recurrence", "weekly\r\n"),
    ])
    def test_rejects_line_breaks_in_text_fields(self, field, value):
        """Test that a free-text column may not span lines."""
        result = self.validator.validate_request(
            "user1", "Income", 100, "2024/05/17 13:00", **{field: value}
        )
        assert result.fields_with_errors() == [field]

    def test_rejects_line_break_in_username(self):
        result = self.validator.validate_request("user\n1", "Income", 100, "2024/05/17 13:00")
        assert result.fields_with_errors() == ["account_username"]

    def test_record_checks_every_text_field(self):
        """Test that validate_record passes metadata through."""
        record = TransactionRecord(
            account_username="user1",
            operation="Income",
            amount=Decimal("100"),
            timestamp="2024/05/17 13:00",
            location="line one\nline two",
        )
        assert self.validator.validate_record(record).fields_with_errors() == ["location"]
