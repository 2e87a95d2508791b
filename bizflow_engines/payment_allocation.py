"""
Module: bizflow_engines.payment_allocation
Responsibility:
    Distribute an incoming payment across a customer's outstanding
    documents, oldest debt first.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    Invoked by the payment service when a payment is recorded.

Invariants enforced:
    - Conservation: ``total_allocated + remaining_credit == payment_amount``.
    - ``total_allocated == sum(allocation.amount_allocated)``.
    - FIFO: documents are walked by ascending document date; ties keep
      input order (stable sort), not the caller's overall order.
    - Surplus payment is reported as ``remaining_credit``, never dropped.

Failure modes:
    - InvalidPaymentError when the payment amount is negative.
    - CurrencyMismatchError when a document is in another currency.

Concurrency:
    The inputs must be a consistent snapshot of the ledger. Two payments
    allocated against the same customer at once would both read the same
    ``amount_paid``; the payment service serializes allocation per
    customer.

Usage:
    from bizflow_engines.payment_allocation import PaymentAllocator, OutstandingDocument

    result = PaymentAllocator().allocate(
        payment_amount=Money.of("80.00", "EUR"),
        documents=[
            OutstandingDocument(
                document_id="doc-1",
                document_number="INV-0001",
                document_date=date(2024, 1, 15),
                total=Money.of("50.00", "EUR"),
            ),
        ],
    )
    print(result.remaining_credit)  # Money: 30.00 EUR
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from datetime import date
from typing import Sequence
from uuid import UUID

from bizflow_engines.rounding import STANDARD_ROUNDING, RoundingPolicy
from bizflow_engines.tracer import traced_engine
from bizflow_kernel.domain.values import Money
from bizflow_kernel.exceptions import CurrencyMismatchError, InvalidPaymentError
from bizflow_kernel.logging_config import get_logger

logger = get_logger("engines.payment_allocation")


@dataclass(frozen=True)
class OutstandingDocument:
    """
    A document the payment may be applied to.

    Contract:
        Snapshot supplied by the payment service. Settled documents
        should be excluded by the caller; the allocator still skips any
        whose outstanding amount is zero or negative.
    """

    document_id: str | UUID
    document_number: str
    document_date: date
    total: Money
    amount_paid: Money | None = field(default=None)

    def __post_init__(self) -> None:
        if self.amount_paid is None:
            object.__setattr__(self, "amount_paid", Money.zero(self.total.currency))

    @property
    def outstanding(self) -> Money:
        """Total minus amounts already paid."""
        return self.total - self.amount_paid


@dataclass(frozen=True)
class Allocation:
    """
    The part of a payment applied to one document.

    Guarantees:
        - ``outstanding_after == outstanding_before - amount_allocated``
        - ``fully_paid`` iff ``outstanding_after`` is zero
    """

    document_id: str | UUID
    document_number: str
    document_total: Money
    previously_paid: Money
    outstanding_before: Money
    amount_allocated: Money
    outstanding_after: Money
    fully_paid: bool


@dataclass(frozen=True)
class AllocationResult:
    """
    Complete payment allocation.

    Guarantees:
        - ``total_allocated + remaining_credit == payment_amount``
        - ``total_allocated == sum(a.amount_allocated for a in allocations)``
    """

    payment_amount: Money
    total_allocated: Money
    remaining_credit: Money
    allocations: tuple[Allocation, ...]

    @property
    def fully_allocated(self) -> bool:
        """True if every unit of the payment was applied."""
        return self.remaining_credit.is_zero

    @property
    def documents_paid(self) -> int:
        """Number of documents settled in full by this payment."""
        return sum(1 for a in self.allocations if a.fully_paid)


class PaymentAllocator:
    """
    Apply payments to outstanding documents, oldest first.

    Contract:
        Pure functions - no I/O, no database access. The allocator owns
        no mutable state and can be shared across threads.
    """

    def __init__(self, rounding: RoundingPolicy = STANDARD_ROUNDING):
        self._rounding = rounding

    @traced_engine(
        "payment_allocation", "1.0", fingerprint_fields=("payment_amount", "documents")
    )
    def allocate(
        self,
        payment_amount: Money,
        documents: Sequence[OutstandingDocument],
    ) -> AllocationResult:
        """
        Allocate a payment across outstanding documents.

        Args:
            payment_amount: Amount received (zero is valid)
            documents: Candidate documents, in any order

        Returns:
            AllocationResult with one Allocation per document that
            received part of the payment

        Raises:
            InvalidPaymentError: If payment_amount < 0
            CurrencyMismatchError: If a document is in another currency
        """
        t0 = time.monotonic()
        currency = payment_amount.currency

        if payment_amount.is_negative:
            logger.error("payment_allocation_negative_payment", extra={
                "payment_amount": payment_amount,
                "currency": currency.code,
            })
            raise InvalidPaymentError(payment_amount.amount, currency.code)

        for doc in documents:
            for money in (doc.total, doc.amount_paid):
                if money.currency != currency:
                    logger.error("payment_allocation_currency_mismatch", extra={
                        "document_id": str(doc.document_id),
                        "payment_currency": currency.code,
                        "document_currency": money.currency.code,
                    })
                    raise CurrencyMismatchError(
                        expected=currency.code,
                        received=money.currency.code,
                        context=f"document {doc.document_number}",
                    )

        round_money = self._rounding.round_money
        payment = round_money(payment_amount)

        logger.info("payment_allocation_started", extra={
            "payment_amount": payment,
            "currency": currency.code,
            "document_count": len(documents),
        })

        # sorted() is stable: same-date documents keep their input order
        ordered = sorted(documents, key=lambda d: d.document_date)

        remaining = payment
        allocations: list[Allocation] = []
        skipped = 0

        for doc in ordered:
            if not remaining.is_positive:
                break

            total = round_money(doc.total)
            previously_paid = round_money(doc.amount_paid)
            outstanding = round_money(total - previously_paid)
            if not outstanding.is_positive:
                skipped += 1
                logger.debug("payment_allocation_document_skipped", extra={
                    "document_id": str(doc.document_id),
                    "outstanding": outstanding,
                })
                continue

            allocated = min(remaining, outstanding)
            outstanding_after = round_money(outstanding - allocated)
            remaining = round_money(remaining - allocated)

            allocations.append(
                Allocation(
                    document_id=doc.document_id,
                    document_number=doc.document_number,
                    document_total=total,
                    previously_paid=previously_paid,
                    outstanding_before=outstanding,
                    amount_allocated=allocated,
                    outstanding_after=outstanding_after,
                    fully_paid=outstanding_after.is_zero,
                )
            )

        total_allocated = sum(
            (a.amount_allocated for a in allocations),
            self._rounding.zero(currency),
        )

        # INVARIANT: conservation of the payment amount
        assert total_allocated.amount + remaining.amount == payment.amount, (
            f"Allocation conservation violated: "
            f"{total_allocated.amount} + {remaining.amount} != {payment.amount}"
        )

        duration_ms = round((time.monotonic() - t0) * 1000, 2)
        logger.info("payment_allocation_completed", extra={
            "payment_amount": payment,
            "total_allocated": total_allocated,
            "remaining_credit": remaining,
            "allocation_count": len(allocations),
            "documents_skipped": skipped,
            "duration_ms": duration_ms,
        })

        return AllocationResult(
            payment_amount=payment,
            total_allocated=round_money(total_allocated),
            remaining_credit=remaining,
            allocations=tuple(allocations),
        )


_default_allocator = PaymentAllocator()


def allocate_payment(
    payment_amount: Money,
    documents: Sequence[OutstandingDocument],
) -> AllocationResult:
    """Allocate a payment oldest-first with standard rounding."""
    return _default_allocator.allocate(payment_amount, documents)
