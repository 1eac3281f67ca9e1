"""Journal service for TradeJournal.

Ties the entry form, the SQLite store and the CSV codec together for one
account. Every change that can move the running balance (adding a
backdated entry, editing an entry, changing the initial balance) restamps
balance_at_entry along the whole chain.
"""

import logging
from typing import Optional, Union

from tradejournal.calc import calculate_summary, next_balance, recompute_balances
from tradejournal.db.store import JournalStore
from tradejournal.form import EntryForm, build_entry
from tradejournal.io.csv_codec import ImportResult, parse_journal, serialize_journal
from tradejournal.models import Account, JournalData, JournalEntry, new_entry_id
from tradejournal.models.account import DEFAULT_ACCOUNT_NAME, DEFAULT_INITIAL_BALANCE

logger = logging.getLogger(__name__)


class JournalService:
    """Operations on a single account's journal."""

    def __init__(
        self,
        store: JournalStore,
        account_id: str,
        default_name: str = DEFAULT_ACCOUNT_NAME,
        default_initial_balance: float = DEFAULT_INITIAL_BALANCE,
    ):
        """Initialize the service.

        Args:
            store: JournalStore instance for persistence.
            account_id: Account the service operates on.
            default_name: Name used when the account does not exist yet.
            default_initial_balance: Balance used when the account does not exist yet.
        """
        self._store = store
        self._account_id = account_id
        self._default_account = Account(
            id=account_id,
            name=default_name,
            initial_balance=default_initial_balance,
        )

    @property
    def account_id(self) -> str:
        return self._account_id

    # ==================== Account ====================

    def get_account(self) -> Account:
        """Get the account, creating it with default settings if missing."""
        account = self._store.get_account(self._account_id)
        if account is None:
            account = self._default_account
            self._store.save_account(account)
            logger.info("Created account %s", self._account_id)
        return account

    def rename_account(self, name: str) -> Account:
        account = self.get_account().model_copy(update={"name": name})
        self._store.save_account(account)
        return account

    def set_initial_balance(self, initial_balance: float) -> Account:
        """Change the initial balance and restamp every entry's balance.

        Args:
            initial_balance: New starting balance.

        Returns:
            The updated account.
        """
        account = self.get_account().model_copy(update={"initial_balance": initial_balance})
        self._store.save_account(account)
        self._persist_chain(self._store.get_entries(self._account_id), account.initial_balance)
        return account

    # ==================== Entries ====================

    def get_entries(self) -> list[JournalEntry]:
        return self._store.get_entries(self._account_id)

    def get_entry(self, entry_id: str) -> Optional[JournalEntry]:
        return self._store.get_entry(self._account_id, entry_id)

    def get_data(self) -> JournalData:
        """Get the account settings and all entries, oldest first."""
        account = self.get_account()
        return JournalData(
            account_name=account.name,
            initial_balance=account.initial_balance,
            entries=self.get_entries(),
        )

    def next_balance(self) -> float:
        """Balance a new entry appended after the latest one is stamped with."""
        account = self.get_account()
        return next_balance(account.initial_balance, self.get_entries())

    def current_balance(self) -> float:
        return self.next_balance()

    def summary(self) -> dict:
        account = self.get_account()
        return calculate_summary(account.initial_balance, self.get_entries())

    def add_entry(self, form: EntryForm) -> JournalEntry:
        """Create an entry from a validated form.

        Args:
            form: Validated form input.

        Returns:
            The stored entry with its balance stamped.
        """
        account = self.get_account()
        existing = self._store.get_entries(self._account_id)

        entry = build_entry(form, next_balance(account.initial_balance, existing))
        chain = recompute_balances(account.initial_balance, existing + [entry])
        entry = next(e for e in chain if e.id == entry.id)

        self._store.add_entry(self._account_id, entry)
        self._persist_chain(existing, account.initial_balance, chain)
        logger.info("Added %s entry %s", entry.kind.value, entry.id)
        return entry

    def edit_entry(self, entry_id: str, form: EntryForm) -> JournalEntry:
        """Replace an entry, keeping its ID, and restamp later balances.

        Args:
            entry_id: ID of the entry to replace.
            form: Validated form input for the new version.

        Returns:
            The stored replacement.

        Raises:
            KeyError: If the entry does not exist.
        """
        original = self._store.get_entry(self._account_id, entry_id)
        if original is None:
            raise KeyError(entry_id)

        account = self.get_account()
        replacement = build_entry(form, original.balance_at_entry, entry_id=entry_id)
        self._store.replace_entry(self._account_id, replacement)

        entries = self._store.get_entries(self._account_id)
        chain = self._persist_chain(entries, account.initial_balance)
        logger.info("Edited entry %s", entry_id)
        return next(e for e in chain if e.id == entry_id)

    def clear(self) -> int:
        """Delete every entry of the account."""
        deleted = self._store.clear_entries(self._account_id)
        logger.info("Cleared %d entries from account %s", deleted, self._account_id)
        return deleted

    def _persist_chain(
        self,
        stored: list[JournalEntry],
        initial_balance: float,
        chain: Optional[list[JournalEntry]] = None,
    ) -> list[JournalEntry]:
        """Write back every stored entry whose restamped balance differs."""
        if chain is None:
            chain = recompute_balances(initial_balance, stored)
        previous = {entry.id: entry for entry in stored}
        for entry in chain:
            old = previous.get(entry.id)
            if old is not None and old.balance_at_entry != entry.balance_at_entry:
                self._store.replace_entry(self._account_id, entry)
        return chain

    # ==================== CSV ====================

    def export_csv(self, include_row_numbers: bool = False) -> str:
        """Serialize the whole account to CSV text."""
        return serialize_journal(self.get_data(), include_row_numbers=include_row_numbers)

    def import_csv(self, text: Union[str, bytes]) -> ImportResult:
        """Replace the account and all its entries with a CSV import.

        Args:
            text: CSV document.

        Returns:
            The parse result, including row-level warnings.

        Raises:
            JournalImportError: If the file cannot be parsed at all.
        """
        result = parse_journal(text)

        seen: set[str] = set()
        entries = []
        warnings = list(result.warnings)
        for entry in result.data.entries:
            if entry.id in seen:
                replacement_id = new_entry_id()
                message = f"Duplicate entry id {entry.id}, assigned {replacement_id}"
                logger.warning(message)
                warnings.append(message)
                entry = entry.model_copy(update={"id": replacement_id})
            seen.add(entry.id)
            entries.append(entry)

        self._store.save_account(
            Account(
                id=self._account_id,
                name=result.data.account_name,
                initial_balance=result.data.initial_balance,
            )
        )
        self._store.replace_all_entries(self._account_id, entries)
        logger.info(
            "Imported %d entries into account %s (%d skipped)",
            len(entries),
            self._account_id,
            result.skipped_rows,
        )

        return result.model_copy(
            update={
                "data": result.data.model_copy(update={"entries": entries}),
                "warnings": warnings,
            }
        )
