"""Account directory domain service."""

import logging
from typing import Optional

from ledgercore.database.base import Database
from ledgercore.domain.entities import Account, AccountTreeNode, AccountType
from ledgercore.domain.errors import (
    DependencyError,
    DuplicateCodeError,
    NotFoundError,
    ValidationError,
    account_code_not_found,
    account_delete_blocked,
    account_not_found,
    duplicate_account_code,
)

logger = logging.getLogger(__name__)

MAX_CODE_LENGTH = 20


class AccountService:
    """Service for managing the chart of accounts."""

    def __init__(self, db: Database):
        """Initialize account service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_account(
        self,
        code: str,
        name: str,
        account_type: AccountType,
        parent_id: Optional[int] = None,
        is_postable: bool = True,
        description: Optional[str] = None,
    ) -> int:
        """Create a new account.

        Args:
            code: Unique account code (e.g. "1000")
            name: Account name
            account_type: Account classification
            parent_id: Optional header account to nest under
            is_postable: False for header/summary accounts
            description: Optional description

        Returns:
            Account ID

        Raises:
            DuplicateCodeError: If the code already exists
            NotFoundError: If the parent doesn't exist
            ValidationError: If code/name are invalid or the parent can't hold children
        """
        code = code.strip() if code else ""
        name = name.strip() if name else ""
        if not code:
            raise ValidationError("Account code is required")
        if len(code) > MAX_CODE_LENGTH:
            raise ValidationError(f"Account code must be {MAX_CODE_LENGTH} characters or less")
        if not name:
            raise ValidationError("Account name is required")
        try:
            account_type = AccountType(account_type)
        except ValueError:
            raise ValidationError(f"Unknown account type '{account_type}'") from None

        if self.db.get_account_by_code(code) is not None:
            raise DuplicateCodeError(duplicate_account_code(code))

        if parent_id is not None:
            parent = self._require(parent_id)
            self._check_parent(parent, account_type)

        account_id = self.db.create_account(
            code=code,
            name=name,
            account_type=account_type,
            parent_id=parent_id,
            is_postable=is_postable,
            description=description,
        )
        logger.info("Created %s account %s '%s' (ID: %s)", account_type.value, code, name, account_id)
        return account_id

    def get_account(self, account_id: int) -> Account:
        """Get account by ID.

        Raises:
            NotFoundError: If account doesn't exist
        """
        return self._require(account_id)

    def get_account_by_code(self, code: str) -> Account:
        """Get account by code.

        Raises:
            NotFoundError: If no account has this code
        """
        account = self.db.get_account_by_code(code)
        if account is None:
            raise NotFoundError(account_code_not_found(code))
        return account

    def resolve_account(self, ref: str | int) -> Account:
        """Resolve an account code or ID.

        Codes win over IDs, so a numeric code like "1000" resolves as a code
        before it is tried as an ID.

        Raises:
            NotFoundError: If neither lookup matches
        """
        if isinstance(ref, int):
            return self._require(ref)

        account = self.db.get_account_by_code(ref.strip())
        if account is not None:
            return account

        try:
            account_id = int(ref)
        except ValueError:
            raise NotFoundError(account_code_not_found(ref)) from None
        return self._require(account_id)

    def update_account(
        self,
        account_id: int,
        name: Optional[str] = None,
        description: Optional[str] = None,
        parent_id: Optional[int] = None,
        clear_parent: bool = False,
        is_postable: Optional[bool] = None,
        is_active: Optional[bool] = None,
    ) -> None:
        """Update account fields.

        Code and type are fixed once created. Deactivating an account only
        blocks new lines; posted history is never rewritten.

        Args:
            account_id: Account ID to update
            name: Optional new name
            description: Optional new description
            parent_id: Optional new parent header account
            clear_parent: If True, move the account to the top level
            is_postable: Optional new postability flag
            is_active: Optional new active flag

        Raises:
            NotFoundError: If account or parent doesn't exist
            ValidationError: If the change would break the hierarchy
        """
        account = self._require(account_id)

        if name is not None and not name.strip():
            raise ValidationError("Account name is required")

        if clear_parent and parent_id is not None:
            raise ValidationError("Cannot set both parent_id and clear_parent")

        if parent_id is not None:
            parent = self._require(parent_id)
            self._check_parent(parent, account.account_type)
            self._check_no_cycle(account_id, parent)

        if is_postable and not account.is_postable:
            if self.db.get_account_child_count(account_id) > 0:
                raise ValidationError(
                    f"Account '{account.code}' has child accounts and must stay a header account"
                )

        self.db.update_account(
            account_id=account_id,
            name=name.strip() if name is not None else None,
            description=description,
            parent_id=parent_id,
            update_parent=clear_parent,
            is_postable=is_postable,
            is_active=is_active,
        )
        if is_active is False and account.is_active:
            logger.info("Deactivated account %s", account.code)

    def delete_account(self, account_id: int) -> None:
        """Delete an account that nothing references.

        Raises:
            NotFoundError: If account doesn't exist
            DependencyError: If journal lines or child accounts reference it
        """
        self._require(account_id)

        line_count = self.db.get_account_line_count(account_id)
        child_count = self.db.get_account_child_count(account_id)
        if line_count > 0 or child_count > 0:
            raise DependencyError(account_delete_blocked(account_id, line_count, child_count))

        self.db.delete_account(account_id)

    def list_accounts(
        self,
        account_type: Optional[AccountType] = None,
        is_active: Optional[bool] = None,
        is_postable: Optional[bool] = None,
        search: Optional[str] = None,
    ) -> list[Account]:
        """List accounts ordered by code.

        Args:
            account_type: Optional type filter
            is_active: Optional active flag filter
            is_postable: Optional postability filter
            search: Optional substring matched against code and name

        Returns:
            List of account entities
        """
        return self.db.list_accounts(
            account_type=account_type,
            is_active=is_active,
            is_postable=is_postable,
            search=search,
        )

    def get_account_tree(self) -> tuple[AccountTreeNode, ...]:
        """Get the chart of accounts as a tree.

        Returns:
            Root nodes ordered by code, each with nested children
        """
        accounts = self.db.list_accounts()
        children_map: dict[Optional[int], list[Account]] = {}
        for account in accounts:
            children_map.setdefault(account.parent_id, []).append(account)

        def build(parent_id: Optional[int], level: int) -> tuple[AccountTreeNode, ...]:
            return tuple(
                AccountTreeNode(account=acc, level=level, children=build(acc.id, level + 1))
                for acc in children_map.get(parent_id, [])
            )

        return build(None, 0)

    def _require(self, account_id: int) -> Account:
        account = self.db.get_account(account_id)
        if account is None:
            raise NotFoundError(account_not_found(account_id))
        return account

    def _check_parent(self, parent: Account, account_type: AccountType) -> None:
        if parent.is_postable:
            raise ValidationError(
                f"Parent account '{parent.code}' is postable; only header accounts can have children"
            )
        if parent.account_type is not account_type:
            raise ValidationError(
                f"Parent account '{parent.code}' is {parent.account_type.value}, not {account_type.value}"
            )

    def _check_no_cycle(self, account_id: int, parent: Account) -> None:
        # Walk up from the new parent; meeting the account itself means a cycle
        current: Optional[Account] = parent
        while current is not None:
            if current.id == account_id:
                raise ValidationError("Account hierarchy cannot contain cycles")
            current = self.db.get_account(current.parent_id) if current.parent_id is not None else None
