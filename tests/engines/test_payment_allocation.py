"""
Tests for payment allocation.

Covers:
- Oldest-first (FIFO) allocation
- Surplus reported as remaining credit
- Partial payments
- Previously paid and settled documents
- Validation and error handling
"""

from datetime import date
from decimal import Decimal

import pytest

from bizflow_engines.payment_allocation import (
    OutstandingDocument,
    PaymentAllocator,
    allocate_payment,
)
from bizflow_kernel.domain.values import Money
from bizflow_kernel.exceptions import CurrencyMismatchError, InvalidPaymentError


def _doc(doc_id, doc_date, total, paid=None, currency="EUR") -> OutstandingDocument:
    return OutstandingDocument(
        document_id=doc_id,
        document_number=f"INV-{doc_id}",
        document_date=doc_date,
        total=Money.of(total, currency),
        amount_paid=Money.of(paid, currency) if paid is not None else None,
    )


class TestAllocateSingleDocument:
    """Tests against one outstanding document."""

    def setup_method(self):
        self.allocator = PaymentAllocator()
        self.documents = [_doc("D1", date(2024, 1, 15), "50.00")]

    def test_overpayment_leaves_credit(self):
        result = self.allocator.allocate(Money.of("80.00", "EUR"), self.documents)

        assert len(result.allocations) == 1
        allocation = result.allocations[0]
        assert allocation.amount_allocated == Money.of("50.00", "EUR")
        assert allocation.fully_paid
        assert allocation.outstanding_after.is_zero
        assert result.total_allocated == Money.of("50.00", "EUR")
        assert result.remaining_credit == Money.of("30.00", "EUR")
        assert not result.fully_allocated

    def test_partial_payment(self):
        result = self.allocator.allocate(Money.of("30.00", "EUR"), self.documents)

        allocation = result.allocations[0]
        assert allocation.amount_allocated == Money.of("30.00", "EUR")
        assert not allocation.fully_paid
        assert allocation.outstanding_after == Money.of("20.00", "EUR")
        assert result.remaining_credit.is_zero
        assert result.fully_allocated

    def test_exact_payment(self):
        result = self.allocator.allocate(Money.of("50.00", "EUR"), self.documents)

        assert result.allocations[0].fully_paid
        assert result.fully_allocated
        assert result.documents_paid == 1

    def test_zero_payment(self):
        result = self.allocator.allocate(Money.zero("EUR"), self.documents)

        assert result.allocations == ()
        assert result.total_allocated.is_zero
        assert result.remaining_credit.is_zero

    def test_no_documents(self):
        result = allocate_payment(Money.of("25.00", "EUR"), [])

        assert result.allocations == ()
        assert result.remaining_credit == Money.of("25.00", "EUR")


class TestAllocationOrder:
    """Oldest documents are paid first."""

    def setup_method(self):
        self.allocator = PaymentAllocator()
        self.documents = [
            _doc("D3", date(2024, 3, 1), "100.00"),
            _doc("D1", date(2024, 1, 1), "100.00"),
            _doc("D2", date(2024, 2, 1), "100.00"),
        ]

    def test_oldest_first(self):
        result = self.allocator.allocate(Money.of("150.00", "EUR"), self.documents)

        assert [a.document_id for a in result.allocations] == ["D1", "D2"]
        assert result.allocations[0].amount_allocated == Money.of("100.00", "EUR")
        assert result.allocations[1].amount_allocated == Money.of("50.00", "EUR")

    def test_later_document_untouched_while_earlier_unpaid(self):
        result = self.allocator.allocate(Money.of("60.00", "EUR"), self.documents)

        assert [a.document_id for a in result.allocations] == ["D1"]
        assert not result.allocations[0].fully_paid

    def test_same_date_keeps_input_order(self):
        documents = [
            _doc("B", date(2024, 1, 1), "10.00"),
            _doc("A", date(2024, 1, 1), "10.00"),
        ]
        result = self.allocator.allocate(Money.of("15.00", "EUR"), documents)

        assert [a.document_id for a in result.allocations] == ["B", "A"]

    def test_enough_to_pay_everything(self):
        result = self.allocator.allocate(Money.of("400.00", "EUR"), self.documents)

        assert result.documents_paid == 3
        assert result.remaining_credit == Money.of("100.00", "EUR")


class TestPreviouslyPaid:
    """Documents with earlier payments."""

    def setup_method(self):
        self.allocator = PaymentAllocator()

    def test_outstanding_accounts_for_previous_payments(self):
        documents = [_doc("D1", date(2024, 1, 1), "100.00", paid="40.00")]
        result = self.allocator.allocate(Money.of("100.00", "EUR"), documents)

        allocation = result.allocations[0]
        assert allocation.previously_paid == Money.of("40.00", "EUR")
        assert allocation.outstanding_before == Money.of("60.00", "EUR")
        assert allocation.amount_allocated == Money.of("60.00", "EUR")
        assert result.remaining_credit == Money.of("40.00", "EUR")

    def test_settled_and_overpaid_documents_skipped(self):
        documents = [
            _doc("PAID", date(2024, 1, 1), "100.00", paid="100.00"),
            _doc("OVER", date(2024, 1, 2), "100.00", paid="120.00"),
            _doc("OPEN", date(2024, 1, 3), "50.00"),
        ]
        result = self.allocator.allocate(Money.of("50.00", "EUR"), documents)

        assert [a.document_id for a in result.allocations] == ["OPEN"]

    def test_document_outstanding_property(self):
        doc = _doc("D1", date(2024, 1, 1), "100.00", paid="25.50")
        assert doc.outstanding == Money.of("74.50", "EUR")

    def test_amount_paid_defaults_to_zero(self):
        doc = _doc("D1", date(2024, 1, 1), "100.00")
        assert doc.amount_paid == Money.zero("EUR")


class TestAllocationErrors:
    """Validation and error handling."""

    def setup_method(self):
        self.allocator = PaymentAllocator()
        self.documents = [_doc("D1", date(2024, 1, 1), "50.00")]

    def test_negative_payment_rejected(self):
        with pytest.raises(InvalidPaymentError) as exc_info:
            self.allocator.allocate(Money.of("-10.00", "EUR"), self.documents)

        assert exc_info.value.code == "INVALID_PAYMENT"
        assert exc_info.value.payment_amount == Decimal("-10.00")

    def test_document_in_other_currency_rejected(self):
        documents = self.documents + [_doc("D2", date(2024, 1, 2), "10.00", currency="USD")]

        with pytest.raises(CurrencyMismatchError) as exc_info:
            self.allocator.allocate(Money.of("10.00", "EUR"), documents)
        assert exc_info.value.received == "USD"

    def test_logs_completion(self, captured_logs):
        self.allocator.allocate(Money.of("80.00", "EUR"), self.documents)

        completed = [r for r in captured_logs() if r["message"] == "payment_allocation_completed"]
        assert completed[0]["total_allocated"] == "50.00"
        assert completed[0]["remaining_credit"] == "30.00"
