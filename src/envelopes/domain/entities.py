"""Domain model entities for envelopes.

These are pure data classes representing business concepts, independent of
how the state document is persisted. Every entity is immutable; the budget
state is changed by building a new ``BudgetState`` and handing it to the store.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Optional

STATE_VERSION = 1


class TransactionType(str, Enum):
    """Transaction type derived from the sign of the amount."""

    EXPENSE = "expense"
    INCOME = "income"
    TRANSFER = "transfer"
    ADJUSTMENT = "adjustment"

    @classmethod
    def from_amount(cls, amount: Decimal) -> "TransactionType":
        if amount < 0:
            return cls.EXPENSE
        if amount > 0:
            return cls.INCOME
        return cls.ADJUSTMENT


class CategoryType(str, Enum):
    """Envelope type."""

    EXPENSE = "expense"
    INCOME = "income"
    TRANSFER = "transfer"


class ImportJobStatus(str, Enum):
    """Lifecycle of an import job."""

    PREVIEW = "preview"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(frozen=True)
class Currency:
    """Currency domain entity."""

    id: str
    code: str
    name: Optional[str] = None
    symbol: Optional[str] = None


@dataclass(frozen=True)
class Account:
    """Bank account domain entity."""

    id: str
    name: str
    type: str
    currency_id: str
    initial_balance: Decimal = Decimal("0")
    description: Optional[str] = None
    is_active: bool = True


@dataclass(frozen=True)
class Merchant:
    """Merchant (payee) domain entity."""

    id: str
    name: str
    description: Optional[str] = None


@dataclass(frozen=True)
class Category:
    """Envelope domain entity.

    ``parent_id`` is stored but never traversed; envelopes are a flat list.
    """

    id: str
    name: str
    type: str = CategoryType.EXPENSE.value
    parent_id: Optional[str] = None
    description: Optional[str] = None


@dataclass(frozen=True)
class Transaction:
    """Transaction domain entity.

    ``amount`` is negative for expenses and positive for income.
    ``transaction_date`` is a calendar day formatted as YYYY-MM-DD.
    """

    id: str
    account_id: str
    transaction_date: str
    amount: Decimal
    currency_id: str
    type: str
    description: Optional[str] = None
    merchant_id: Optional[str] = None
    notes: Optional[str] = None
    import_key: Optional[str] = None


@dataclass(frozen=True)
class TransactionSplit:
    """Portion of a transaction assigned to one envelope (same sign as the transaction)."""

    id: str
    transaction_id: str
    category_id: str
    amount: Decimal
    notes: Optional[str] = None


@dataclass(frozen=True)
class Tag:
    """Free-text tag."""

    id: str
    name: str


@dataclass(frozen=True)
class TransactionTag:
    """Association between a transaction and a tag."""

    transaction_id: str
    tag_id: str

    @property
    def key(self) -> str:
        return transaction_tag_key(self.transaction_id, self.tag_id)


def transaction_tag_key(transaction_id: str, tag_id: str) -> str:
    """Return the composite key of a transaction-tag association."""
    return f"{transaction_id}:{tag_id}"


@dataclass(frozen=True)
class BudgetRow:
    """Monthly budgeted amount for one envelope.

    ``start_date`` is always the first day of the month (YYYY-MM-01).
    """

    id: str
    category_id: str
    name: str
    budgeted_amount: Decimal
    currency_id: str
    start_date: str
    end_date: Optional[str] = None
    is_recurring: bool = False


@dataclass(frozen=True)
class ImportJob:
    """Audit record of one CSV commit."""

    id: str
    upload_filename: str
    status: str
    started_at: Optional[str] = None
    finished_at: Optional[str] = None
    total_rows: Optional[int] = None
    processed_rows: int = 0
    failed_rows: int = 0
    success_rows: int = 0
    error_summary: Optional[str] = None


@dataclass(frozen=True)
class ImportJobMapping:
    """Column mapping confirmed for an import job."""

    id: str
    import_job_id: str
    csv_column_name: str
    target_field_name: str
    mapping_type: str = "column"
    fixed_value: Optional[str] = None


@dataclass(frozen=True)
class ImportJobError:
    """Failed row of an import job, with the raw row as a JSON array string."""

    id: str
    import_job_id: str
    row_number: int
    error_message: str
    raw_data: Optional[str] = None


@dataclass(frozen=True)
class BudgetSettings:
    """User-level defaults stored alongside the budget data."""

    default_currency_code: str = "USD"
    default_account_type: str = "checking"


@dataclass(frozen=True)
class BudgetState:
    """Whole budget document.

    Collections are keyed by entity id, except ``transaction_tags`` (keyed by
    ``transactionId:tagId``) and ``import_keys`` (import key -> transaction id).
    """

    version: int = STATE_VERSION
    settings: BudgetSettings = field(default_factory=BudgetSettings)
    currencies: dict[str, Currency] = field(default_factory=dict)
    accounts: dict[str, Account] = field(default_factory=dict)
    merchants: dict[str, Merchant] = field(default_factory=dict)
    categories: dict[str, Category] = field(default_factory=dict)
    transactions: dict[str, Transaction] = field(default_factory=dict)
    splits: dict[str, TransactionSplit] = field(default_factory=dict)
    tags: dict[str, Tag] = field(default_factory=dict)
    transaction_tags: dict[str, TransactionTag] = field(default_factory=dict)
    budgets: dict[str, BudgetRow] = field(default_factory=dict)
    import_jobs: dict[str, ImportJob] = field(default_factory=dict)
    import_job_mappings: dict[str, ImportJobMapping] = field(default_factory=dict)
    import_job_errors: dict[str, ImportJobError] = field(default_factory=dict)
    import_keys: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class ImportPreview:
    """What the import wizard shows before a commit."""

    headers: list[str]
    sample_rows: list[dict[str, str]]
    suggested_mapping: dict[str, str]
    row_count: int


@dataclass(frozen=True)
class CreatedCounts:
    """Number of entities created by one commit."""

    accounts: int = 0
    merchants: int = 0
    categories: int = 0
    transactions: int = 0
    tags: int = 0


@dataclass(frozen=True)
class ImportRowError:
    """Failed row. ``row_number`` counts the header as row 1; 0 means the whole batch."""

    row_number: int
    message: str
    raw_row: Optional[list[str]] = None


@dataclass(frozen=True)
class ImportCommitResult:
    """Outcome of a CSV commit."""

    import_job_id: str
    total_rows: int
    success_rows: int
    failed_rows: int
    created: CreatedCounts
    errors: list[ImportRowError]
