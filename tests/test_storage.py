"""Tests for the row codec and the flat-file transaction store."""

import os

import pytest
from decimal import Decimal
from pathlib import Path

from smart_finance.models.transaction import TransactionRecord
from smart_finance.services.storage import (
    CSV_HEADER,
    CsvTransactionStore,
    MalformedAmountError,
    StorageError,
)
from smart_finance.services.storage import codec


def make_record(**overrides) -> TransactionRecord:
    fields = {
        "account_username": "user1",
        "operation": "Income",
        "amount": Decimal("100.0"),
        "timestamp": "2024/05/18 10:00",
        "merchant": "market",
        "type": "Income",
    }
    fields.update(overrides)
    return TransactionRecord(**fields)


class TestCodec:
    """Tests for encoding and decoding single lines."""

    def test_header_column_order(self):
        """Test the exact header line."""
        assert CSV_HEADER == (
            "accountUsername,operation,amount,timestamp,merchant,type,remark,"
            "category,paymentMethod,location,tag,attachment,recurrence"
        )

    def test_encode_keeps_trailing_empty_fields(self):
        """Test that empty metadata still yields 13 fields."""
        line = codec.encode(make_record())
        assert line == "user1,Income,100.0,2024/05/18 10:00,market,Income,,,,,,,"
        assert len(line.split(",")) == 13

    def test_decode_all_fields(self):
        """Test decoding a fully populated row."""
        record = codec.decode(
            "bob,Expense,12.50,2024/05/16 12:00,cafe,Expense,lunch,food,card,"
            "Berlin,work,receipt.png,none"
        )
        assert record.account_username == "bob"
        assert record.amount == Decimal("12.50")
        assert record.category == "food"
        assert record.payment_method == "card"
        assert record.location == "Berlin"
        assert record.tag == "work"
        assert record.attachment == "receipt.png"
        assert record.recurrence == "none"

    def test_decode_preserves_amount_text(self):
        """Test that a decoded amount re-encodes unchanged."""
        line = "user1,Transfer In,600.00,2024/05/15 10:00,merchant,Transfer,,,,,,,"
        assert codec.encode(codec.decode(line)) == line

    def test_decode_skips_short_rows(self):
        """Test that rows with fewer than 13 fields are skipped."""
        assert codec.decode("user1,Income,100,2024/05/18 10:00") is None
        assert codec.decode("") is None

    def test_decode_ignores_extra_fields(self):
        """Test that fields beyond the 13th are ignored."""
        record = codec.decode("user1,Income,5,2024/05/18 10:00,,,,,,,,,,extra")
        assert record.recurrence == ""

    def test_decode_rejects_bad_amount(self):
        """Test that a non-numeric amount raises instead of skipping."""
        with pytest.raises(MalformedAmountError) as exc_info:
            codec.decode("user1,Income,abc,2024/05/18 10:00,,,,,,,,,")
        assert exc_info.value.raw_amount == "abc"
        assert isinstance(exc_info.value, StorageError)

    @pytest.mark.parametrize("raw", ["NaN", "Infinity", ""])
    def test_decode_rejects_non_finite_amount(self, raw):
        with pytest.raises(MalformedAmountError):
            codec.decode(f"user1,Income,{raw},2024/05/18 10:00,,,,,,,,,")


class TestStoreReads:
    """Tests for reading the backing file."""

    def test_missing_file_reads_empty(self, tmp_path: Path):
        """Test that a missing file is not an error."""
        store = CsvTransactionStore(tmp_path / "nope.csv")
        assert store.read_all() == []
        assert store.read_by_user("user1") == []

    def test_header_is_never_data(self, csv_path, write_csv):
        """Test that a header-only file has no records."""
        write_csv(csv_path)
        assert CsvTransactionStore(csv_path).read_all() == []

    def test_read_all_in_file_order(self, csv_path, write_csv):
        """Test that records come back in insertion order."""
        write_csv(
            csv_path,
            "user1,Income,100,2024/05/18 10:00,,,,,,,,,",
            "user2,Expense,30,2024/05/18 11:00,,,,,,,,,",
            "user1,Deposit,50,2024/05/19 10:00,,,,,,,,,",
        )
        records = CsvTransactionStore(csv_path).read_all()
        assert [r.account_username for r in records] == ["user1", "user2", "user1"]
        assert [r.operation for r in records] == ["Income", "Expense", "Deposit"]

    def test_read_skips_malformed_rows(self, csv_path, write_csv):
        """Test that short rows are silently skipped."""
        write_csv(
            csv_path,
            "user1,Income,100,2024/05/18 10:00,,,,,,,,,",
            "user1,broken",
            "",
            "user1,Income,200,2024/05/19 10:00,,,,,,,,,",
        )
        records = CsvTransactionStore(csv_path).read_by_user("user1")
        assert [r.amount for r in records] == [Decimal("100"), Decimal("200")]

    def test_read_by_user_is_exact_match(self, csv_path, write_csv):
        """Test that username matching is case-sensitive and exact."""
        write_csv(
            csv_path,
            "user1,Income,100,2024/05/18 10:00,,,,,,,,,",
            "User1,Income,200,2024/05/18 10:00,,,,,,,,,",
            "user10,Income,300,2024/05/18 10:00,,,,,,,,,",
        )
        records = CsvTransactionStore(csv_path).read_by_user("user1")
        assert len(records) == 1
        assert records[0].amount == Decimal("100")

    def test_bad_amount_aborts_read(self, csv_path, write_csv):
        """Test that a corrupt amount is a fatal read error."""
        write_csv(
            csv_path,
            "user1,Income,100,2024/05/18 10:00,,,,,,,,,",
            "user1,Income,lots,2024/05/19 10:00,,,,,,,,,",
        )
        with pytest.raises(MalformedAmountError):
            CsvTransactionStore(csv_path).read_all()

    def test_bad_amount_of_other_user_not_parsed(self, csv_path, write_csv):
        """Test that a per-user read only parses that user's rows."""
        write_csv(
            csv_path,
            "user1,Income,100,2024/05/18 10:00,,,,,,,,,",
            "user2,Income,lots,2024/05/19 10:00,,,,,,,,,",
        )
        records = CsvTransactionStore(csv_path).read_by_user("user1")
        assert len(records) == 1

    def test_directory_path_reads_empty(self, tmp_path: Path):
        """Test that an unreadable path degrades to an empty result."""
        assert CsvTransactionStore(tmp_path).read_all() == []


class TestStoreWrites:
    """Tests for appending and removing."""

    def test_append_creates_file_with_header(self, store, csv_path):
        """Test first append writes the header."""
        assert store.append(make_record()) is True
        lines = csv_path.read_text(encoding="utf-8").splitlines()
        assert lines[0] == CSV_HEADER
        assert lines[1] == "user1,Income,100.0,2024/05/18 10:00,market,Income,,,,,,,"

    def test_append_adds_header_to_empty_file(self, store, csv_path):
        """Test that an existing but empty file also gets a header."""
        csv_path.write_text("", encoding="utf-8")
        assert store.append(make_record()) is True
        assert csv_path.read_text(encoding="utf-8").splitlines()[0] == CSV_HEADER

    def test_append_after_missing_trailing_newline(self, store, csv_path):
        """Test appending to a file whose last line has no newline."""
        csv_path.write_text(
            CSV_HEADER + "\nuser1,Income,1,2024/05/17 10:00,,,,,,,,,",
            encoding="utf-8",
        )
        assert store.append(make_record()) is True
        assert len(store.read_all()) == 2

    def test_round_trip(self, store):
        """Test that appended records read back intact and in order."""
        first = make_record(remark="salary", category="work", tag="monthly")
        second = make_record(
            operation="Expense",
            amount=Decimal("20.25"),
            timestamp="2024/05/19 09:30",
            payment_method="cash",
            location="home",
            attachment="a.png",
            recurrence="weekly",
        )
        store.append(first)
        store.append(second)
        assert store.read_by_user("user1") == [first, second]

    @pytest.mark.parametrize("overrides", [
        {"amount": Decimal("0")},
        {"amount": Decimal("-1")},
        {"operation": "Other"},
        {"account_username": ""},
        {"timestamp": "2024-05-18 10:00"},
    ])
    def test_append_rejects_invalid_without_writing(self, store, csv_path, overrides):
        """Test that invalid records never touch the file."""
        store.append(make_record())
        before = csv_path.read_bytes()
        assert store.append(make_record(**overrides)) is False
        assert csv_path.read_bytes() == before

    def test_append_many_is_all_or_nothing(self, store, csv_path):
        """Test that one invalid record blocks the whole batch."""
        batch = [make_record(), make_record(amount=Decimal("-3"))]
        assert store.append_many(batch) == 0
        assert not csv_path.exists()

        assert store.append_many([make_record(), make_record(timestamp="2024/05/19 10:00")]) == 2
        assert len(store.read_all()) == 2

    def test_remove_existing(self, store):
        """Test removing one record keeps the rest in order."""
        store.append(make_record(amount=Decimal("100")))
        store.append(make_record(amount=Decimal("200"), timestamp="2024/05/19 10:00"))
        store.append(make_record(account_username="user2", amount=Decimal("300")))

        assert store.remove_by_user_and_timestamp("user1", "2024/05/18 10:00") is True

        remaining = store.read_all()
        assert [(r.account_username, r.timestamp) for r in remaining] == [
            ("user1", "2024/05/19 10:00"),
            ("user2", "2024/05/18 10:00"),
        ]

    def test_remove_missing_leaves_file_unchanged(self, store, csv_path):
        """Test that a miss returns False and does not rewrite."""
        store.append(make_record())
        before = csv_path.read_bytes()
        assert store.remove_by_user_and_timestamp("user1", "2030/01/01 00:00") is False
        assert store.remove_by_user_and_timestamp("nobody", "2024/05/18 10:00") is False
        assert csv_path.read_bytes() == before

    def test_remove_on_missing_file(self, tmp_path: Path):
        """Test that removing from a missing file does not create it."""
        path = tmp_path / "absent.csv"
        assert CsvTransactionStore(path).remove_by_user_and_timestamp("user1", "2024/05/18 10:00") is False
        assert not path.exists()

    def test_remove_drops_all_records_sharing_timestamp(self, store):
        """Test that duplicates at the same timestamp go together."""
        store.append(make_record(amount=Decimal("1")))
        store.append(make_record(amount=Decimal("2")))
        store.append(make_record(amount=Decimal("3"), timestamp="2024/05/19 10:00"))

        assert store.remove_by_user_and_timestamp("user1", "2024/05/18 10:00") is True
        assert [r.amount for r in store.read_all()] == [Decimal("3")]

    def test_remove_rewrites_header(self, store, csv_path):
        """Test that the rewritten file still starts with the header."""
        store.append(make_record())
        store.remove_by_user_and_timestamp("user1", "2024/05/18 10:00")
        assert csv_path.read_text(encoding="utf-8") == CSV_HEADER + "\n"

    def test_append_rejects_line_break_in_text_field(self, store, csv_path):
        """Test that a line break in metadata is rejected before writing."""
        store.append(make_record())
        before = csv_path.read_bytes()
        assert store.append(make_record(timestamp="2024/05/19 10:00", remark="a\rb")) is False
        assert csv_path.read_bytes() == before


def failing_writes(monkeypatch, failures=None):
    """
    Make Path.open raise OSError for write mode.

    Fails the first `failures` write opens, or every one when None.
    Returns a dict counting write opens.
    """
    real_open = Path.open
    calls = {"w": 0}

    def _open(self, mode="r", *args, **kwargs):
        if mode == "w":
            calls["w"] += 1
            if failures is None or calls["w"] <= failures:
                raise OSError("disk unavailable")
        return real_open(self, mode, *args, **kwargs)

    monkeypatch.setattr(Path, "open", _open)
    return calls


class TestStoreRewriteFailures:
    """Tests for retry and failure handling of full-file rewrites."""

    @pytest.fixture
    def filled_store(self, store):
        store.append(make_record(amount=Decimal("100")))
        store.append(make_record(amount=Decimal("200"), timestamp="2024/05/19 10:00"))
        return store

    def test_transient_failure_is_retried(self, filled_store, monkeypatch):
        """Test that two failed attempts are followed by a successful one."""
        calls = failing_writes(monkeypatch, failures=2)

        assert filled_store.remove_by_user_and_timestamp("user1", "2024/05/18 10:00") is True
        assert calls["w"] == 3
        assert [r.amount for r in filled_store.read_all()] == [Decimal("200")]

    def test_persistent_failure_returns_false(self, filled_store, csv_path, monkeypatch):
        """Test that the store gives up after three attempts and keeps the file."""
        before = csv_path.read_bytes()
        calls = failing_writes(monkeypatch)

        assert filled_store.remove_by_user_and_timestamp("user1", "2024/05/18 10:00") is False
        assert calls["w"] == 3
        assert csv_path.read_bytes() == before

    def test_failed_replace_keeps_original(self, filled_store, csv_path, monkeypatch):
        """Test that a failure after writing leaves the original and no temp file."""
        before = csv_path.read_bytes()

        def _fail(src, dst):
            raise OSError("rename failed")

        monkeypatch.setattr(os, "replace", _fail)

        assert filled_store.remove_by_user_and_timestamp("user1", "2024/05/18 10:00") is False
        assert csv_path.read_bytes() == before
        assert list(csv_path.parent.glob("*.tmp")) == []

    def test_successful_rewrite_leaves_no_temp_file(self, filled_store, csv_path):
        assert filled_store.remove_by_user_and_timestamp("user1", "2024/05/18 10:00") is True
        assert list(csv_path.parent.glob("*.tmp")) == []


class TestStorePaths:
    """Tests for backing path configuration."""

    def test_default_path_comes_from_settings(self, tmp_path: Path):
        """Test that a store without a path uses the configured file."""
        store = CsvTransactionStore()
        assert store.path == tmp_path / "default.csv"

    def test_with_path_is_independent(self, store, tmp_path: Path):
        """Test that redirecting gives a new store and leaves the old one alone."""
        other = store.with_path(tmp_path / "other.csv")
        other.append(make_record())
        assert other.path == tmp_path / "other.csv"
        assert store.read_all() == []
        assert len(other.read_all()) == 1
