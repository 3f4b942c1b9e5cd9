"""Tools exposed to the hosted chat assistant.

Every tool takes and returns JSON-compatible values with the camelCase keys
the assistant integration uses, and calls the same domain services as the CLI.
"""

from decimal import Decimal
from typing import Any, Optional

from envelopes.domain.budget import BudgetService
from envelopes.domain.csv_import import CSVImportService
from envelopes.domain.entities import ImportCommitResult, ImportPreview
from envelopes.domain.summary import SummaryService
from envelopes.store.state import BudgetStore


def to_camel(name: str) -> str:
    """Convert snake_case to camelCase ("import_job_id" -> "importJobId")."""
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)


def to_payload(value: Any) -> Any:
    """Convert summary dicts to JSON-compatible values with camelCase keys."""
    if isinstance(value, dict):
        return {to_camel(str(k)): to_payload(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_payload(v) for v in value]
    if isinstance(value, Decimal):
        return float(value)
    return value


def preview_to_payload(preview: ImportPreview) -> dict[str, Any]:
    """Convert an import preview; header-keyed dicts keep their keys."""
    return {
        "headers": list(preview.headers),
        "sampleRows": [dict(row) for row in preview.sample_rows],
        "suggestedMapping": dict(preview.suggested_mapping),
        "rowCount": preview.row_count,
    }


def commit_result_to_payload(result: ImportCommitResult) -> dict[str, Any]:
    """Convert an import commit result."""
    created = result.created
    return {
        "importJobId": result.import_job_id,
        "totalRows": result.total_rows,
        "successRows": result.success_rows,
        "failedRows": result.failed_rows,
        "created": {
            "accounts": created.accounts,
            "merchants": created.merchants,
            "categories": created.categories,
            "transactions": created.transactions,
            "tags": created.tags,
        },
        "errors": [
            {"rowNumber": e.row_number, "message": e.message} for e in result.errors
        ],
    }


TOOL_DEFINITIONS: dict[str, str] = {
    "importCsvPreview": "Preview a transaction CSV (headers, sample rows, mapping suggestions).",
    "importCsvCommit": (
        "Import a transaction CSV using a confirmed column mapping "
        "(date, account and amount are required)."
    ),
    "getEnvelopeSummary": "Get budgeted, spent and remaining amounts per envelope for a month.",
    "setEnvelopeBudget": "Set an envelope budget for a month (creates a monthly budget row).",
    "getUncategorizedTransactions": "List uncategorized transactions for a month.",
    "categorizeTransaction": "Assign a category to a transaction (creates/replaces a single split).",
    "getSpendingByCategory": "Compute spending totals by category for a month (expense splits only).",
    "getSpendingTrend": "Compute daily income/expense trend for a month.",
}


class BudgetTools:
    """Assistant tool implementations over one budget store."""

    def __init__(self, store: BudgetStore):
        self.store = store
        self.import_service = CSVImportService(store)
        self.budget_service = BudgetService(store)
        self.summary_service = SummaryService(store)

    def call(self, name: str, args: dict[str, Any]) -> dict[str, Any]:
        """Dispatch a tool call by its assistant-facing name."""
        handlers = {
            "importCsvPreview": lambda: self.import_csv_preview(args["csvText"]),
            "importCsvCommit": lambda: self.import_csv_commit(
                args["csvText"], args["mapping"], args.get("filename")
            ),
            "getEnvelopeSummary": lambda: self.get_envelope_summary(args.get("month")),
            "setEnvelopeBudget": lambda: self.set_envelope_budget(
                args["month"], args["categoryName"], args["amount"]
            ),
            "getUncategorizedTransactions": lambda: self.get_uncategorized_transactions(
                args.get("month"), args.get("limit", 50)
            ),
            "categorizeTransaction": lambda: self.categorize_transaction(
                args["transactionId"], args["categoryName"]
            ),
            "getSpendingByCategory": lambda: self.get_spending_by_category(
                args.get("month"), args.get("topN", 12)
            ),
            "getSpendingTrend": lambda: self.get_spending_trend(args.get("month")),
        }
        if name not in handlers:
            raise KeyError(f"Unknown tool '{name}'")
        return handlers[name]()

    def import_csv_preview(self, csv_text: str) -> dict[str, Any]:
        return preview_to_payload(self.import_service.preview_csv_import(csv_text))

    def import_csv_commit(
        self, csv_text: str, mapping: dict[str, str], filename: Optional[str] = None
    ) -> dict[str, Any]:
        result = self.import_service.commit_csv_import(
            csv_text=csv_text,
            mapping=mapping,
            filename=filename,
            default_currency_code=self.store.get().settings.default_currency_code,
        )
        return commit_result_to_payload(result)

    def get_envelope_summary(self, month: Optional[str] = None) -> dict[str, Any]:
        return to_payload(self.summary_service.envelope_summary(month))

    def set_envelope_budget(
        self, month: str, category_name: str, amount: float
    ) -> dict[str, Any]:
        row = self.budget_service.set_envelope_budget(
            month=month, category_name=category_name, amount=Decimal(str(amount))
        )
        return {"ok": True, "month": month, "categoryId": row.category_id}

    def get_uncategorized_transactions(
        self, month: Optional[str] = None, limit: int = 50
    ) -> dict[str, Any]:
        return to_payload(self.summary_service.uncategorized_transactions(month, limit))

    def categorize_transaction(
        self, transaction_id: str, category_name: str
    ) -> dict[str, Any]:
        category = self.budget_service.categorize_transaction(transaction_id, category_name)
        return {"ok": True, "transactionId": transaction_id, "categoryId": category.id}

    def get_spending_by_category(
        self, month: Optional[str] = None, top_n: int = 12
    ) -> dict[str, Any]:
        return to_payload(self.summary_service.spending_by_category(month, top_n))

    def get_spending_trend(self, month: Optional[str] = None) -> dict[str, Any]:
        return to_payload(self.summary_service.spending_trend(month))
