"""CSV import domain service."""

import json
import logging
import re
from dataclasses import replace
from typing import Optional

from envelopes.domain.budget import BudgetService
from envelopes.domain.entities import (
    BudgetState,
    CategoryType,
    CreatedCounts,
    ImportCommitResult,
    ImportJob,
    ImportJobError,
    ImportJobMapping,
    ImportJobStatus,
    ImportPreview,
    ImportRowError,
    Transaction,
    TransactionType,
)
from envelopes.domain.errors import (
    ValidationError,
    invalid_amount,
    invalid_date,
    missing_account,
    missing_required_mapping,
)
from envelopes.store.state import BudgetStore
from envelopes.utils.amount_parser import parse_amount
from envelopes.utils.csv_parser import normalize_header_name, parse_csv
from envelopes.utils.date_parser import parse_date
from envelopes.utils.import_key import build_import_key

logger = logging.getLogger(__name__)

# Semantic field -> normalized header synonyms, in suggestion order
HEADER_SYNONYMS: dict[str, tuple[str, ...]] = {
    "date": ("date", "transactiondate", "posteddate"),
    "account": ("account", "accountname"),
    "amount": ("amount", "amt", "value"),
    "currency": ("currency", "ccy"),
    "description": ("description", "desc", "narrative"),
    "merchant": ("merchant", "payee"),
    "category": ("category", "envelope"),
    "tags": ("tags", "tag"),
    "notes": ("notes", "note", "memo"),
}

MAPPING_FIELDS: tuple[str, ...] = tuple(HEADER_SYNONYMS)
REQUIRED_FIELDS: tuple[str, ...] = ("date", "account", "amount")

SAMPLE_ROW_COUNT = 10
DEFAULT_CURRENCY_CODE = "USD"
DEFAULT_UPLOAD_FILENAME = "import.csv"

_TAG_SEPARATOR = re.compile(r"[|,]")


def suggest_mapping(headers: list[str]) -> dict[str, str]:
    """Guess which header holds each semantic field.

    The first matching header wins for each field.

    Args:
        headers: Header names in file order

    Returns:
        Dict of semantic field -> header name, for the fields that matched
    """
    mapping: dict[str, str] = {}
    for header in headers:
        normalized = normalize_header_name(header)
        for field, synonyms in HEADER_SYNONYMS.items():
            if field not in mapping and normalized in synonyms:
                mapping[field] = header
    return mapping


def row_to_record(headers: list[str], row: list[str]) -> dict[str, str]:
    """Align a row with the headers; missing trailing fields read as empty."""
    return {
        header: (row[i] if i < len(row) else "").strip()
        for i, header in enumerate(headers)
    }


def _get_field(record: dict[str, str], mapping: dict[str, str], field: str) -> str:
    header = mapping.get(field)
    if not header:
        return ""
    return record.get(header, "")


def _entity_counts(state: BudgetState) -> CreatedCounts:
    return CreatedCounts(
        accounts=len(state.accounts),
        merchants=len(state.merchants),
        categories=len(state.categories),
        transactions=len(state.transactions),
        tags=len(state.tags),
    )


class CSVImportService:
    """Service for previewing and committing CSV imports."""

    def __init__(self, store: BudgetStore):
        """Initialize CSV import service.

        Args:
            store: Budget state store
        """
        self.store = store
        self.budget_service = BudgetService(store)

    def preview_csv_import(self, csv_text: str) -> ImportPreview:
        """Preview a CSV text before committing it.

        Args:
            csv_text: Raw CSV text

        Returns:
            ImportPreview with headers, the first sample rows, a suggested
            mapping and the number of data rows
        """
        parsed = parse_csv(csv_text)
        sample_rows = [
            row_to_record(parsed.headers, row)
            for row in parsed.rows[:SAMPLE_ROW_COUNT]
        ]
        return ImportPreview(
            headers=parsed.headers,
            sample_rows=sample_rows,
            suggested_mapping=suggest_mapping(parsed.headers),
            row_count=len(parsed.rows),
        )

    def commit_csv_import(
        self,
        csv_text: str,
        mapping: dict[str, str],
        filename: Optional[str] = None,
        default_currency_code: Optional[str] = None,
    ) -> ImportCommitResult:
        """Import the rows of a CSV text into the budget.

        Rows are processed in file order and each row is written to the store
        as soon as it is processed; storage receives the state once, when the
        commit ends. A failing row is recorded and skipped; it never stops
        the batch. Rows whose import key is already known count as successful
        without writing anything.

        Args:
            csv_text: Raw CSV text
            mapping: Semantic field -> header name; must map date, account and amount
            filename: Name recorded on the import job
            default_currency_code: Currency for rows without one; defaults to
                the stored default currency

        Returns:
            ImportCommitResult with row counts, created entity counts and
            per-row errors (row 1 is the header)
        """
        parsed = parse_csv(csv_text)
        headers = parsed.headers
        total_rows = len(parsed.rows)
        import_job_id = self.store.create_id()

        for field in REQUIRED_FIELDS:
            if not mapping.get(field):
                logger.debug("Rejecting import: no column mapped for %s", field)
                return ImportCommitResult(
                    import_job_id=import_job_id,
                    total_rows=total_rows,
                    success_rows=0,
                    failed_rows=total_rows,
                    created=CreatedCounts(),
                    errors=[
                        ImportRowError(
                            row_number=0, message=missing_required_mapping(field)
                        )
                    ],
                )

        counts_before = _entity_counts(self.store.get())
        default_currency = (
            default_currency_code
            or self.store.get().settings.default_currency_code
            or DEFAULT_CURRENCY_CODE
        )
        errors: list[ImportRowError] = []
        success = 0
        with self.store.batch():
            self._start_job(import_job_id, filename, total_rows, mapping)
            for index, row in enumerate(parsed.rows):
                row_number = index + 2  # header is row 1
                record = row_to_record(headers, row)
                try:
                    self._import_row(record, mapping, default_currency)
                    success += 1
                except Exception as e:
                    logger.debug("Row %d failed: %s", row_number, e)
                    error = ImportRowError(
                        row_number=row_number, message=str(e), raw_row=row
                    )
                    errors.append(error)
                    self._record_row_error(import_job_id, error)
            self._finish_job(import_job_id, total_rows, success, len(errors))

        counts_after = _entity_counts(self.store.get())
        created = CreatedCounts(
            accounts=max(0, counts_after.accounts - counts_before.accounts),
            merchants=max(0, counts_after.merchants - counts_before.merchants),
            categories=max(0, counts_after.categories - counts_before.categories),
            transactions=max(0, counts_after.transactions - counts_before.transactions),
            tags=max(0, counts_after.tags - counts_before.tags),
        )
        logger.debug(
            "Import %s finished: %d rows, %d succeeded, %d failed",
            import_job_id,
            total_rows,
            success,
            len(errors),
        )
        return ImportCommitResult(
            import_job_id=import_job_id,
            total_rows=total_rows,
            success_rows=success,
            failed_rows=len(errors),
            created=created,
            errors=errors,
        )

    def _import_row(
        self, record: dict[str, str], mapping: dict[str, str], default_currency: str
    ) -> None:
        """Import one row; raises ValidationError for unusable values."""
        budget = self.budget_service

        date_raw = _get_field(record, mapping, "date")
        account_raw = _get_field(record, mapping, "account")
        amount_raw = _get_field(record, mapping, "amount")

        try:
            txn_date = parse_date(date_raw)
        except ValueError:
            raise ValidationError(invalid_date(date_raw))
        if not account_raw:
            raise ValidationError(missing_account())
        try:
            amount = parse_amount(amount_raw)
        except ValueError:
            raise ValidationError(invalid_amount(amount_raw))

        currency_code = (_get_field(record, mapping, "currency") or default_currency).upper()
        currency = budget.get_or_create_currency(currency_code)
        account = budget.get_or_create_account(name=account_raw, currency_id=currency.id)

        merchant_raw = _get_field(record, mapping, "merchant")
        merchant = budget.get_or_create_merchant(merchant_raw) if merchant_raw else None

        description = _get_field(record, mapping, "description") or None
        notes = _get_field(record, mapping, "notes") or None

        import_key = build_import_key(
            date=txn_date,
            account=account.name,
            amount=amount,
            description=description,
            merchant=merchant.name if merchant else None,
        )
        if budget.find_transaction_by_import_key(import_key) is not None:
            return

        transaction = budget.upsert_transaction(
            Transaction(
                id=self.store.create_id(),
                account_id=account.id,
                transaction_date=txn_date,
                amount=amount,
                currency_id=currency.id,
                type=TransactionType.from_amount(amount).value,
                description=description,
                merchant_id=merchant.id if merchant else None,
                notes=notes,
                import_key=import_key,
            )
        )

        category_raw = _get_field(record, mapping, "category")
        if category_raw:
            category = budget.get_or_create_category(
                name=category_raw,
                category_type=(
                    CategoryType.EXPENSE.value if amount < 0 else CategoryType.INCOME.value
                ),
            )
            budget.replace_transaction_splits(
                transaction.id, [{"category_id": category.id, "amount": amount}]
            )

        tags_raw = _get_field(record, mapping, "tags")
        if tags_raw:
            tag_names = [t.strip() for t in _TAG_SEPARATOR.split(tags_raw) if t.strip()]
            for tag_name in tag_names:
                tag = budget.get_or_create_tag(tag_name)
                budget.add_transaction_tag(transaction.id, tag.id)

    def _start_job(
        self,
        import_job_id: str,
        filename: Optional[str],
        total_rows: int,
        mapping: dict[str, str],
    ) -> None:
        job = ImportJob(
            id=import_job_id,
            upload_filename=filename or DEFAULT_UPLOAD_FILENAME,
            status=ImportJobStatus.RUNNING.value,
            started_at=self.store.now_iso(),
            total_rows=total_rows,
        )
        job_mappings = [
            ImportJobMapping(
                id=self.store.create_id(),
                import_job_id=import_job_id,
                csv_column_name=header,
                target_field_name=field,
            )
            for field, header in mapping.items()
            if header
        ]
        self.store.update(
            lambda prev: replace(
                prev,
                import_jobs={**prev.import_jobs, job.id: job},
                import_job_mappings={
                    **prev.import_job_mappings,
                    **{m.id: m for m in job_mappings},
                },
            )
        )

    def _record_row_error(self, import_job_id: str, error: ImportRowError) -> None:
        job_error = ImportJobError(
            id=self.store.create_id(),
            import_job_id=import_job_id,
            row_number=error.row_number,
            error_message=error.message,
            raw_data=json.dumps(error.raw_row),
        )
        self.store.update(
            lambda prev: replace(
                prev,
                import_job_errors={**prev.import_job_errors, job_error.id: job_error},
            )
        )

    def _finish_job(
        self, import_job_id: str, total_rows: int, success: int, failed: int
    ) -> None:
        finished_at = self.store.now_iso()

        def apply(prev):
            job = replace(
                prev.import_jobs[import_job_id],
                status=ImportJobStatus.COMPLETED.value,
                finished_at=finished_at,
                processed_rows=total_rows,
                success_rows=success,
                failed_rows=failed,
                error_summary=f"{failed} rows failed" if failed else None,
            )
            return replace(prev, import_jobs={**prev.import_jobs, import_job_id: job})

        self.store.update(apply)
