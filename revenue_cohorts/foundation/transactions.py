"""Revenue transaction contract definitions and validation utilities.

The transaction contract captures the minimum information every cohort
retention calculation relies on: who the customer is, when a revenue change
took effect, the recurring revenue after the change and what kind of change
it was. Raw records from upstream systems (CSV exports, billing APIs) are
validated into immutable :class:`Transaction` objects once, so the analysis
engine never has to re-check them.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Iterable, Mapping


class TransactionKind(str, Enum):
    """Type of revenue event recorded for a customer."""

    NEW = "new"
    EXPANSION = "expansion"
    CONTRACTION = "contraction"
    CHURN = "churn"
    RENEWAL = "renewal"


def _to_decimal(value: Any) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


@dataclass(frozen=True)
class Transaction:
    """A single revenue event for a customer.

    Attributes
    ----------
    customer_id:
        Identifier of the customer (account) the event belongs to.
    effective_date:
        Calendar date the new revenue level takes effect. A ``datetime``
        is reduced to its date.
    revenue_amount:
        Recurring revenue after the event. Churn events normally carry 0.
    kind:
        What happened (new business, expansion, contraction, churn, renewal).
    previous_revenue_amount:
        Optional revenue level before the event, kept for lineage.
    """

    customer_id: str
    effective_date: date
    revenue_amount: Decimal
    kind: TransactionKind = TransactionKind.NEW
    previous_revenue_amount: Decimal | None = None

    def __post_init__(self) -> None:
        if isinstance(self.effective_date, datetime):
            object.__setattr__(self, "effective_date", self.effective_date.date())
        if not isinstance(self.kind, TransactionKind):
            object.__setattr__(self, "kind", TransactionKind(self.kind))
        object.__setattr__(self, "revenue_amount", _to_decimal(self.revenue_amount))
        if self.previous_revenue_amount is not None:
            object.__setattr__(
                self,
                "previous_revenue_amount",
                _to_decimal(self.previous_revenue_amount),
            )

    @property
    def is_churn(self) -> bool:
        return self.kind is TransactionKind.CHURN


@dataclass(frozen=True)
class CustomerSnapshot:
    """Legacy point-in-time customer record (account, close date, revenue).

    Snapshot exports carry no history, so each record is treated as the
    customer's acquisition at ``close_date``.
    """

    customer_id: str
    close_date: date
    revenue_amount: Decimal

    def to_transaction(self) -> Transaction:
        return Transaction(
            customer_id=self.customer_id,
            effective_date=self.close_date,
            revenue_amount=self.revenue_amount,
            kind=TransactionKind.NEW,
        )


def snapshots_to_transactions(snapshots: Iterable[CustomerSnapshot]) -> list[Transaction]:
    """Convert snapshot records into ``new`` transactions, preserving order."""
    return [snapshot.to_transaction() for snapshot in snapshots]


def _parse_date(value: Any, idx: int, field_name: str) -> date:
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value.replace("Z", "+00:00")).date()
        except ValueError as exc:
            raise ValueError(
                f"{field_name} is not an ISO date",
                {"record_index": idx, "value": value},
            ) from exc
    raise TypeError(
        f"{field_name} must be a date, datetime or ISO string",
        {"record_index": idx, "value": value},
    )


def _parse_amount(value: Any, idx: int, field_name: str) -> Decimal:
    if isinstance(value, str):
        value = value.replace(",", "").replace("$", "").strip()
    try:
        amount = _to_decimal(value)
    except (InvalidOperation, ValueError) as exc:
        raise ValueError(
            f"{field_name} is not a number",
            {"record_index": idx, "value": value},
        ) from exc
    if not amount.is_finite() or amount < 0:
        raise ValueError(
            f"{field_name} must be a non-negative number",
            {"record_index": idx, "value": value},
        )
    return amount


class TransactionContract:
    """Validate raw revenue records into canonical transactions."""

    #: Fields that must be populated for a transaction record to be valid.
    REQUIRED_FIELDS = ("customer_id", "effective_date", "revenue_amount")

    #: Fields that must be populated for a snapshot record to be valid.
    SNAPSHOT_FIELDS = ("customer_id", "close_date", "revenue_amount")

    @staticmethod
    def _missing(data: Mapping[str, Any], required: Iterable[str]) -> list[str]:
        return [
            name for name in required if data.get(name) is None or data.get(name) == ""
        ]

    def validate_records(self, records: Iterable[Mapping[str, Any]]) -> list[Transaction]:
        """Validate raw transaction dictionaries.

        Parameters
        ----------
        records:
            Iterable of mappings providing at least :attr:`REQUIRED_FIELDS`.
            ``kind`` defaults to ``"new"`` when absent. Dates may be ``date``
            objects or ISO 8601 strings; amounts may be numbers, Decimals or
            strings with currency formatting.

        Raises
        ------
        ValueError
            If a record is missing fields, has an unknown kind or carries a
            negative/unparseable amount. The offending record index is
            included in the exception arguments.
        TypeError
            If a date field has an unsupported type.
        """
        canonical: list[Transaction] = []
        for idx, record in enumerate(records):
            data = dict(record)

            missing = self._missing(data, self.REQUIRED_FIELDS)
            if missing:
                raise ValueError(
                    "Record missing required transaction fields",
                    {"missing_fields": missing, "record_index": idx},
                )

            raw_kind = data.get("kind") or TransactionKind.NEW.value
            try:
                kind = TransactionKind(str(raw_kind).strip().lower())
            except ValueError as exc:
                raise ValueError(
                    "Unknown transaction kind",
                    {"record_index": idx, "value": raw_kind},
                ) from exc

            previous = data.get("previous_revenue_amount")
            canonical.append(
                Transaction(
                    customer_id=str(data["customer_id"]).strip(),
                    effective_date=_parse_date(data["effective_date"], idx, "effective_date"),
                    revenue_amount=_parse_amount(data["revenue_amount"], idx, "revenue_amount"),
                    kind=kind,
                    previous_revenue_amount=(
                        None
                        if previous is None or previous == ""
                        else _parse_amount(previous, idx, "previous_revenue_amount")
                    ),
                )
            )
        return canonical

    def validate_snapshots(
        self, records: Iterable[Mapping[str, Any]]
    ) -> list[CustomerSnapshot]:
        """Validate raw snapshot dictionaries (``customer_id``, ``close_date``, ``revenue_amount``)."""
        snapshots: list[CustomerSnapshot] = []
        for idx, record in enumerate(records):
            data = dict(record)
            missing = self._missing(data, self.SNAPSHOT_FIELDS)
            if missing:
                raise ValueError(
                    "Record missing required snapshot fields",
                    {"missing_fields": missing, "record_index": idx},
                )
            snapshots.append(
                CustomerSnapshot(
                    customer_id=str(data["customer_id"]).strip(),
                    close_date=_parse_date(data["close_date"], idx, "close_date"),
                    revenue_amount=_parse_amount(data["revenue_amount"], idx, "revenue_amount"),
                )
            )
        return snapshots

    def to_serialisable(self, transactions: Iterable[Transaction]) -> list[dict[str, Any]]:
        """Convert transactions into JSON-serialisable dictionaries."""

        payload: list[dict[str, Any]] = []
        for txn in transactions:
            payload.append(
                {
                    "customer_id": txn.customer_id,
                    "effective_date": txn.effective_date.isoformat(),
                    "revenue_amount": str(txn.revenue_amount),
                    "kind": txn.kind.value,
                    "previous_revenue_amount": (
                        None
                        if txn.previous_revenue_amount is None
                        else str(txn.previous_revenue_amount)
                    ),
                }
            )
        return payload
