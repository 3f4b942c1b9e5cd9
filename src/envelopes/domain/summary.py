"""Summary and insight domain service."""

from datetime import date
from decimal import Decimal
from typing import Any, Iterable, Optional

from envelopes.domain.entities import BudgetState, CategoryType, Transaction
from envelopes.domain.errors import ValidationError, invalid_month
from envelopes.store.state import BudgetStore
from envelopes.utils.date_parser import current_month, month_to_range, months_between

ZERO = Decimal("0")


class SummaryService:
    """Service for month-scoped aggregations over the budget state.

    Aggregation results are plain dicts, one per row.
    """

    def __init__(self, store: BudgetStore, today: Optional[date] = None):
        """Initialize summary service.

        Args:
            store: Budget state store
            today: Date used to pick the default month (defaults to today)
        """
        self.store = store
        self.today = today

    def current_month(self) -> str:
        """Return the default month (YYYY-MM)."""
        return current_month(self.today)

    def resolve_month(self, month: Optional[str]) -> tuple[str, str, str]:
        """Resolve an optional month to (month, start, end_exclusive).

        Raises:
            ValidationError: If month is not YYYY-MM
        """
        month = month or self.current_month()
        try:
            start, end_exclusive = month_to_range(month)
        except ValueError:
            raise ValidationError(invalid_month(month))
        return month, start, end_exclusive

    def list_available_months(self) -> list[str]:
        """List every month between the earliest and latest transaction, inclusive."""
        months = [
            tx.transaction_date[:7]
            for tx in self.store.get().transactions.values()
            if len(tx.transaction_date) >= 7
        ]
        if not months:
            return []
        try:
            return months_between(min(months), max(months))
        except ValueError:
            return []

    def envelope_summary(self, month: Optional[str] = None) -> dict[str, Any]:
        """Budgeted, spent and remaining amounts per expense envelope.

        Spent is the absolute value of the month's negative splits. Items are
        sorted by spent, highest first.

        ``uncategorized_count`` counts transactions without a split across all
        months; ``month_uncategorized_count`` counts only the requested month.

        Returns:
            Dict with ``month``, ``items``, ``uncategorized_count`` and
            ``month_uncategorized_count``
        """
        month, start, end_exclusive = self.resolve_month(month)
        state = self.store.get()

        spent_by_category: dict[str, Decimal] = {}
        for split in state.splits.values():
            tx = state.transactions.get(split.transaction_id)
            if tx is None or not start <= tx.transaction_date < end_exclusive:
                continue
            spent = abs(split.amount) if split.amount < 0 else ZERO
            spent_by_category[split.category_id] = (
                spent_by_category.get(split.category_id, ZERO) + spent
            )

        budgeted_by_category: dict[str, Decimal] = {}
        for budget in state.budgets.values():
            if budget.start_date != start:
                continue
            budgeted_by_category[budget.category_id] = (
                budgeted_by_category.get(budget.category_id, ZERO)
                + budget.budgeted_amount
            )

        items = []
        for category in state.categories.values():
            if category.type != CategoryType.EXPENSE.value:
                continue
            budgeted = budgeted_by_category.get(category.id, ZERO)
            spent = spent_by_category.get(category.id, ZERO)
            items.append(
                {
                    "category_id": category.id,
                    "category_name": category.name,
                    "budgeted": budgeted,
                    "spent": spent,
                    "remaining": budgeted - spent,
                }
            )
        items.sort(key=lambda item: item["spent"], reverse=True)

        return {
            "month": month,
            "items": items,
            "uncategorized_count": len(
                self._uncategorized(state, state.transactions.values())
            ),
            "month_uncategorized_count": len(
                self._uncategorized_in_range(state, start, end_exclusive)
            ),
        }

    def uncategorized_transactions(
        self, month: Optional[str] = None, limit: int = 50
    ) -> dict[str, Any]:
        """List the month's transactions without a split, newest first.

        Returns:
            Dict with ``month`` and ``transactions``
        """
        month, start, end_exclusive = self.resolve_month(month)
        state = self.store.get()

        transactions = sorted(
            self._uncategorized_in_range(state, start, end_exclusive),
            key=lambda tx: tx.transaction_date,
            reverse=True,
        )[:limit]

        rows = []
        for tx in transactions:
            account = state.accounts.get(tx.account_id)
            merchant = state.merchants.get(tx.merchant_id) if tx.merchant_id else None
            currency = state.currencies.get(tx.currency_id)
            rows.append(
                {
                    "transaction_id": tx.id,
                    "date": tx.transaction_date,
                    "account": account.name if account else "Unknown",
                    "merchant": merchant.name if merchant else "",
                    "description": tx.description or "",
                    "amount": tx.amount,
                    "currency_code": currency.code if currency else "",
                    "notes": tx.notes or "",
                }
            )
        return {"month": month, "transactions": rows}

    def list_transactions(
        self,
        month: Optional[str] = None,
        query: Optional[str] = None,
        only_uncategorized: bool = False,
        limit: int = 200,
    ) -> dict[str, Any]:
        """List the month's transactions with their envelope, newest first.

        The query is matched case-insensitively as a substring of the account,
        merchant or description. The category is taken from the transaction's
        first split.

        Returns:
            Dict with ``month`` and ``transactions``
        """
        month, start, end_exclusive = self.resolve_month(month)
        state = self.store.get()
        needle = (query or "").strip().lower()

        first_split: dict[str, str] = {}
        for split in state.splits.values():
            first_split.setdefault(split.transaction_id, split.category_id)

        rows = []
        for tx in self._transactions_in_range(state, start, end_exclusive):
            if only_uncategorized and tx.id in first_split:
                continue
            account = state.accounts.get(tx.account_id)
            merchant = state.merchants.get(tx.merchant_id) if tx.merchant_id else None
            row = {
                "transaction_id": tx.id,
                "date": tx.transaction_date,
                "account": account.name if account else "Unknown",
                "merchant": merchant.name if merchant else "",
                "description": tx.description or "",
            }
            if needle and not any(
                needle in row[field].lower()
                for field in ("account", "merchant", "description")
            ):
                continue

            currency = state.currencies.get(tx.currency_id)
            category = state.categories.get(first_split.get(tx.id, ""))
            row.update(
                {
                    "amount": tx.amount,
                    "currency_code": (
                        currency.code
                        if currency
                        else state.settings.default_currency_code
                    ),
                    "category_id": category.id if category else None,
                    "category_name": category.name if category else "",
                }
            )
            rows.append(row)

        rows.sort(key=lambda row: row["date"], reverse=True)
        return {"month": month, "transactions": rows[:limit]}

    def spending_by_category(
        self, month: Optional[str] = None, top_n: int = 12
    ) -> dict[str, Any]:
        """Total expense splits per category, highest first.

        Returns:
            Dict with ``month`` and ``rows`` (``category_id``, ``category_name``, ``total``)
        """
        month, start, end_exclusive = self.resolve_month(month)
        state = self.store.get()

        totals: dict[str, Decimal] = {}
        for split in state.splits.values():
            tx = state.transactions.get(split.transaction_id)
            if tx is None or not start <= tx.transaction_date < end_exclusive:
                continue
            if split.amount >= 0:
                continue
            totals[split.category_id] = totals.get(split.category_id, ZERO) + abs(
                split.amount
            )

        rows = []
        for category_id, total in totals.items():
            category = state.categories.get(category_id)
            rows.append(
                {
                    "category_id": category_id,
                    "category_name": category.name if category else "Unknown",
                    "total": total,
                }
            )
        rows.sort(key=lambda row: row["total"], reverse=True)
        return {"month": month, "rows": rows[:top_n]}

    def spending_trend(self, month: Optional[str] = None) -> dict[str, Any]:
        """Daily income and expense totals for a month, oldest day first.

        Returns:
            Dict with ``month`` and ``rows`` (``day``, ``income``, ``expense``)
        """
        month, start, end_exclusive = self.resolve_month(month)
        by_day: dict[str, dict[str, Decimal]] = {}
        for tx in self._transactions_in_range(self.store.get(), start, end_exclusive):
            totals = by_day.setdefault(tx.transaction_date, {"income": ZERO, "expense": ZERO})
            if tx.amount < 0:
                totals["expense"] += abs(tx.amount)
            elif tx.amount > 0:
                totals["income"] += tx.amount

        rows = [
            {"day": day, "income": totals["income"], "expense": totals["expense"]}
            for day, totals in sorted(by_day.items())
        ]
        return {"month": month, "rows": rows}

    def kpis(self, month: Optional[str] = None) -> dict[str, Any]:
        """Headline numbers for a month.

        Returns:
            Dict with ``month``, ``currency_code``, ``income``, ``expense``,
            ``net``, ``uncategorized_count``, ``transaction_count`` and
            ``total_transaction_count``
        """
        month, start, end_exclusive = self.resolve_month(month)
        state = self.store.get()
        categorized = {split.transaction_id for split in state.splits.values()}

        income = ZERO
        expense = ZERO
        uncategorized = 0
        count = 0
        for tx in self._transactions_in_range(state, start, end_exclusive):
            count += 1
            if tx.amount > 0:
                income += tx.amount
            elif tx.amount < 0:
                expense += abs(tx.amount)
            if tx.id not in categorized:
                uncategorized += 1

        return {
            "month": month,
            "currency_code": state.settings.default_currency_code,
            "income": income,
            "expense": expense,
            "net": income - expense,
            "uncategorized_count": uncategorized,
            "transaction_count": count,
            "total_transaction_count": len(state.transactions),
        }

    def _transactions_in_range(
        self, state: BudgetState, start: str, end_exclusive: str
    ) -> list[Transaction]:
        return [
            tx
            for tx in state.transactions.values()
            if start <= tx.transaction_date < end_exclusive
        ]

    def _uncategorized(
        self, state: BudgetState, transactions: Iterable[Transaction]
    ) -> list[Transaction]:
        categorized = {split.transaction_id for split in state.splits.values()}
        return [tx for tx in transactions if tx.id not in categorized]

    def _uncategorized_in_range(
        self, state: BudgetState, start: str, end_exclusive: str
    ) -> list[Transaction]:
        return self._uncategorized(
            state, self._transactions_in_range(state, start, end_exclusive)
        )
