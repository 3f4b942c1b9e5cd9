"""Budget model domain service."""

from dataclasses import replace
from decimal import Decimal
from typing import Any, Optional, Sequence

from envelopes.domain.entities import (
    Account,
    BudgetRow,
    Category,
    CategoryType,
    Currency,
    Merchant,
    Tag,
    Transaction,
    TransactionSplit,
    TransactionTag,
    transaction_tag_key,
)
from envelopes.domain.errors import (
    NotFoundError,
    ValidationError,
    invalid_month,
    no_currencies,
    transaction_not_found,
)
from envelopes.store.state import BudgetStore
from envelopes.utils.date_parser import parse_month


def _normalize_name(name: str) -> str:
    normalized = (name or "").strip()
    if not normalized:
        raise ValidationError("Name cannot be empty")
    return normalized


class BudgetService:
    """Service for reference entities, splits and monthly envelope budgets.

    Lookups are case-insensitive full scans of the state; every write goes
    through the store immediately.
    """

    def __init__(self, store: BudgetStore):
        """Initialize budget service.

        Args:
            store: Budget state store
        """
        self.store = store

    def get_or_create_currency(self, code: str) -> Currency:
        """Get a currency by code, creating it if needed.

        Args:
            code: Currency code such as "usd" or "EUR" (stored uppercased)

        Returns:
            Currency entity
        """
        code = _normalize_name(code).upper()
        state = self.store.get()
        for currency in state.currencies.values():
            if currency.code == code:
                return currency

        currency = Currency(id=self.store.create_id(), code=code)
        self.store.update(
            lambda prev: replace(
                prev, currencies={**prev.currencies, currency.id: currency}
            )
        )
        return currency

    def get_or_create_account(
        self, name: str, currency_id: str, account_type: Optional[str] = None
    ) -> Account:
        """Get an account by name, creating it if needed.

        Args:
            name: Account name (case-insensitive match)
            currency_id: Currency of a newly created account
            account_type: Type of a newly created account; defaults to the
                stored default account type

        Returns:
            Account entity
        """
        name = _normalize_name(name)
        state = self.store.get()
        for account in state.accounts.values():
            if account.name.lower() == name.lower():
                return account

        account = Account(
            id=self.store.create_id(),
            name=name,
            type=account_type or state.settings.default_account_type,
            currency_id=currency_id,
        )
        self.store.update(
            lambda prev: replace(prev, accounts={**prev.accounts, account.id: account})
        )
        return account

    def get_or_create_merchant(self, name: str) -> Merchant:
        """Get a merchant by name, creating it if needed."""
        name = _normalize_name(name)
        state = self.store.get()
        for merchant in state.merchants.values():
            if merchant.name.lower() == name.lower():
                return merchant

        merchant = Merchant(id=self.store.create_id(), name=name)
        self.store.update(
            lambda prev: replace(
                prev, merchants={**prev.merchants, merchant.id: merchant}
            )
        )
        return merchant

    def get_or_create_category(
        self,
        name: str,
        category_type: str = CategoryType.EXPENSE.value,
        parent_id: Optional[str] = None,
    ) -> Category:
        """Get an envelope by name, creating it if needed.

        Args:
            name: Category name (case-insensitive match)
            category_type: Type of a newly created category
            parent_id: Optional parent of a newly created category

        Returns:
            Category entity (an existing category keeps its own type)
        """
        name = _normalize_name(name)
        state = self.store.get()
        for category in state.categories.values():
            if category.name.lower() == name.lower():
                return category

        category = Category(
            id=self.store.create_id(),
            name=name,
            type=category_type,
            parent_id=parent_id,
        )
        self.store.update(
            lambda prev: replace(
                prev, categories={**prev.categories, category.id: category}
            )
        )
        return category

    def get_or_create_tag(self, name: str) -> Tag:
        """Get a tag by name, creating it if needed."""
        name = _normalize_name(name)
        state = self.store.get()
        for tag in state.tags.values():
            if tag.name.lower() == name.lower():
                return tag

        tag = Tag(id=self.store.create_id(), name=name)
        self.store.update(lambda prev: replace(prev, tags={**prev.tags, tag.id: tag}))
        return tag

    def get_transaction(self, transaction_id: str) -> Optional[Transaction]:
        """Get transaction by ID, or None if not found."""
        return self.store.get().transactions.get(transaction_id)

    def find_transaction_by_import_key(self, import_key: str) -> Optional[Transaction]:
        """Get the transaction registered under an import key, if it still exists."""
        state = self.store.get()
        transaction_id = state.import_keys.get(import_key)
        if transaction_id is None:
            return None
        return state.transactions.get(transaction_id)

    def upsert_transaction(self, transaction: Transaction) -> Transaction:
        """Store a transaction, registering its import key.

        A transaction whose import key already belongs to a stored transaction
        is not written; the stored one is returned instead.
        """
        if transaction.import_key:
            existing = self.find_transaction_by_import_key(transaction.import_key)
            if existing is not None:
                return existing

        def apply(prev):
            import_keys = prev.import_keys
            if transaction.import_key:
                import_keys = {**import_keys, transaction.import_key: transaction.id}
            return replace(
                prev,
                import_keys=import_keys,
                transactions={**prev.transactions, transaction.id: transaction},
            )

        self.store.update(apply)
        return transaction

    def list_splits(self, transaction_id: str) -> list[TransactionSplit]:
        """List the splits of a transaction."""
        return [
            split
            for split in self.store.get().splits.values()
            if split.transaction_id == transaction_id
        ]

    def replace_transaction_splits(
        self, transaction_id: str, splits: Sequence[dict[str, Any]]
    ) -> list[TransactionSplit]:
        """Replace all splits of a transaction.

        Args:
            transaction_id: Transaction ID
            splits: Dicts with ``category_id``, ``amount`` and optional ``notes``

        Returns:
            The new splits
        """
        new_splits = [
            TransactionSplit(
                id=self.store.create_id(),
                transaction_id=transaction_id,
                category_id=s["category_id"],
                amount=Decimal(s["amount"]),
                notes=s.get("notes"),
            )
            for s in splits
        ]

        def apply(prev):
            next_splits = {
                split_id: split
                for split_id, split in prev.splits.items()
                if split.transaction_id != transaction_id
            }
            for split in new_splits:
                next_splits[split.id] = split
            return replace(prev, splits=next_splits)

        self.store.update(apply)
        return new_splits

    def add_transaction_tag(self, transaction_id: str, tag_id: str) -> TransactionTag:
        """Associate a tag with a transaction. Adding an existing pair is harmless."""
        link = TransactionTag(transaction_id=transaction_id, tag_id=tag_id)
        self.store.update(
            lambda prev: replace(
                prev,
                transaction_tags={
                    **prev.transaction_tags,
                    transaction_tag_key(transaction_id, tag_id): link,
                },
            )
        )
        return link

    def list_transaction_tags(self, transaction_id: str) -> list[Tag]:
        """List the tags of a transaction."""
        state = self.store.get()
        return [
            state.tags[link.tag_id]
            for link in state.transaction_tags.values()
            if link.transaction_id == transaction_id and link.tag_id in state.tags
        ]

    def set_monthly_budget(
        self,
        category_id: str,
        month: str,
        budgeted_amount: Decimal,
        currency_id: str,
    ) -> BudgetRow:
        """Set the budgeted amount of an envelope for one month.

        There is at most one row per (category, month); setting it again
        replaces the amount.

        Args:
            category_id: Category ID
            month: Month (YYYY-MM)
            budgeted_amount: Non-negative amount
            currency_id: Currency of the amount

        Returns:
            The stored budget row

        Raises:
            ValidationError: If month is malformed or the amount is negative
        """
        try:
            start_date = parse_month(month).isoformat()
        except ValueError:
            raise ValidationError(invalid_month(month))
        budgeted_amount = Decimal(budgeted_amount)
        if budgeted_amount < 0:
            raise ValidationError("Budgeted amount cannot be negative")

        state = self.store.get()
        existing = next(
            (
                b
                for b in state.budgets.values()
                if b.category_id == category_id and b.start_date == start_date
            ),
            None,
        )
        category = state.categories.get(category_id)
        if category is not None:
            name = category.name
        elif existing is not None:
            name = existing.name
        else:
            name = "Envelope Budget"

        row = BudgetRow(
            id=existing.id if existing is not None else self.store.create_id(),
            category_id=category_id,
            name=name,
            budgeted_amount=budgeted_amount,
            currency_id=currency_id,
            start_date=start_date,
        )
        self.store.update(lambda prev: replace(prev, budgets={**prev.budgets, row.id: row}))
        return row

    def set_envelope_budget(
        self, month: str, category_name: str, amount: Decimal
    ) -> BudgetRow:
        """Set an envelope budget by category name in the default currency.

        Negative amounts are stored as zero. The category is created as an
        expense envelope when it does not exist.

        Raises:
            ValidationError: If no currency exists yet or month is malformed
        """
        state = self.store.get()
        default_code = state.settings.default_currency_code
        currency_id = next(
            (c.id for c in state.currencies.values() if c.code == default_code),
            next(iter(state.currencies), None),
        )
        if currency_id is None:
            raise ValidationError(no_currencies())

        try:
            parse_month(month)
        except ValueError:
            raise ValidationError(invalid_month(month))

        category = self.get_or_create_category(
            name=category_name, category_type=CategoryType.EXPENSE.value
        )
        return self.set_monthly_budget(
            category_id=category.id,
            month=month,
            budgeted_amount=max(Decimal("0"), Decimal(amount)),
            currency_id=currency_id,
        )

    def categorize_transaction(self, transaction_id: str, category_name: str) -> Category:
        """Assign a transaction to one envelope for its full amount.

        Raises:
            NotFoundError: If the transaction does not exist
        """
        transaction = self.get_transaction(transaction_id)
        if transaction is None:
            raise NotFoundError(transaction_not_found(transaction_id))

        category = self.get_or_create_category(
            name=category_name,
            category_type=(
                CategoryType.EXPENSE.value
                if transaction.amount < 0
                else CategoryType.INCOME.value
            ),
        )
        self.replace_transaction_splits(
            transaction.id,
            [{"category_id": category.id, "amount": transaction.amount}],
        )
        return category
