"""Financial reports over posted ledger activity."""

import logging
from datetime import date, timedelta
from decimal import Decimal
from typing import Optional

from ledgercore.database.base import Database
from ledgercore.domain.entities import (
    ZERO,
    Account,
    AccountActivity,
    AccountActivityRow,
    AccountType,
    ActivityTotals,
    BalanceSheet,
    BalanceSheetRow,
    IncomeStatement,
    IncomeStatementRow,
    TrialBalance,
    TrialBalanceRow,
)
from ledgercore.domain.errors import (
    LedgerIntegrityError,
    NotFoundError,
    ValidationError,
    account_not_found,
    fiscal_year_not_found,
    period_not_found,
)

logger = logging.getLogger(__name__)

ONE_DAY = timedelta(days=1)


def _check_range(start_date: Optional[date], end_date: Optional[date]) -> None:
    if start_date is not None and end_date is not None and start_date > end_date:
        raise ValidationError("Start date must be on or before end date")


def _split_net(net_debit: Decimal) -> tuple[Decimal, Decimal]:
    """Put a net debit balance on the debit side, or a net credit on the credit side."""
    if net_debit >= ZERO:
        return net_debit, ZERO
    return ZERO, -net_debit


class ReportService:
    """Service for trial balance, income statement, balance sheet and account activity.

    Only posted and reversed entries contribute; drafts and voided entries
    never appear in any report.
    """

    def __init__(self, db: Database):
        """Initialize report service.

        Args:
            db: Database instance
        """
        self.db = db

    def trial_balance(self, start_date: Optional[date] = None, end_date: Optional[date] = None) -> TrialBalance:
        """Build a trial balance for a date range.

        Args:
            start_date: Optional first date (inclusive)
            end_date: Optional last date (inclusive)

        Returns:
            TrialBalance with one row per account that has activity, ordered by code
        """
        _check_range(start_date, end_date)
        totals = self.db.get_activity_totals(start_date=start_date, end_date=end_date)
        account_ids = [t.account_id for t in totals]
        accounts = self.db.get_accounts(account_ids)

        opening: dict[int, ActivityTotals] = {}
        if start_date is not None and account_ids:
            opening = {
                t.account_id: t
                for t in self.db.get_activity_totals(end_date=start_date - ONE_DAY, account_ids=account_ids)
            }

        rows = []
        for t in totals:
            account = accounts[t.account_id]
            before = opening.get(t.account_id)
            opening_net = before.debit_total - before.credit_total if before else ZERO
            opening_debit, opening_credit = _split_net(opening_net)
            closing_debit, closing_credit = _split_net(opening_net + t.debit_total - t.credit_total)
            rows.append(
                TrialBalanceRow(
                    account_id=account.id,
                    code=account.code,
                    name=account.name,
                    account_type=account.account_type,
                    debit_total=t.debit_total,
                    credit_total=t.credit_total,
                    opening_debit=opening_debit,
                    opening_credit=opening_credit,
                    closing_debit=closing_debit,
                    closing_credit=closing_credit,
                )
            )
        rows.sort(key=lambda row: row.code)

        report = TrialBalance(
            start_date=start_date,
            end_date=end_date,
            rows=tuple(rows),
            total_debit=sum((row.debit_total for row in rows), ZERO),
            total_credit=sum((row.credit_total for row in rows), ZERO),
        )
        if not report.is_balanced:
            logger.error(
                "Trial balance out of balance: debits %s, credits %s",
                report.total_debit,
                report.total_credit,
            )
        return report

    def income_statement(self, start_date: Optional[date] = None, end_date: Optional[date] = None) -> IncomeStatement:
        """Build an income statement for a date range.

        Revenue is reported as credit minus debit and expenses as debit minus
        credit, so both totals are positive in the normal case.
        """
        _check_range(start_date, end_date)
        totals = self.db.get_activity_totals(
            start_date=start_date,
            end_date=end_date,
            account_types=[AccountType.REVENUE, AccountType.EXPENSE],
        )
        accounts = self.db.get_accounts([t.account_id for t in totals])

        revenue: list[IncomeStatementRow] = []
        expenses: list[IncomeStatementRow] = []
        for t in totals:
            account = accounts[t.account_id]
            row = IncomeStatementRow(
                account_id=account.id,
                code=account.code,
                name=account.name,
                account_type=account.account_type,
                amount=account.account_type.signed(t.debit_total, t.credit_total),
            )
            (revenue if account.account_type is AccountType.REVENUE else expenses).append(row)

        revenue.sort(key=lambda row: row.code)
        expenses.sort(key=lambda row: row.code)
        return IncomeStatement(
            start_date=start_date,
            end_date=end_date,
            revenue=tuple(revenue),
            expenses=tuple(expenses),
            total_revenue=sum((row.amount for row in revenue), ZERO),
            total_expense=sum((row.amount for row in expenses), ZERO),
        )

    def balance_sheet(self, as_of_date: Optional[date] = None) -> BalanceSheet:
        """Build a balance sheet as of a date.

        Balances start from each account's running balance and back out any
        posted activity dated after as_of_date. Revenue less expense to date is
        reported as current earnings within equity.

        Raises:
            LedgerIntegrityError: If assets don't equal liabilities plus equity
        """
        as_of_date = as_of_date or date.today()
        later = {t.account_id: t for t in self.db.get_activity_totals(start_date=as_of_date + ONE_DAY)}

        sections: dict[AccountType, list[BalanceSheetRow]] = {t: [] for t in AccountType}
        for account in self.db.list_accounts():
            balance = account.current_balance
            if account.id in later:
                after = later[account.id]
                balance -= account.account_type.signed(after.debit_total, after.credit_total)
            if balance == ZERO:
                continue
            sections[account.account_type].append(
                BalanceSheetRow(
                    account_id=account.id,
                    code=account.code,
                    name=account.name,
                    account_type=account.account_type,
                    balance=balance,
                )
            )

        def total(account_type: AccountType):
            return sum((row.balance for row in sections[account_type]), ZERO)

        current_earnings = total(AccountType.REVENUE) - total(AccountType.EXPENSE)
        report = BalanceSheet(
            as_of_date=as_of_date,
            assets=tuple(sections[AccountType.ASSET]),
            liabilities=tuple(sections[AccountType.LIABILITY]),
            equity=tuple(sections[AccountType.EQUITY]),
            current_earnings=current_earnings,
            total_assets=total(AccountType.ASSET),
            total_liabilities=total(AccountType.LIABILITY),
            total_equity=total(AccountType.EQUITY) + current_earnings,
        )

        if report.total_assets != report.total_liabilities_and_equity:
            logger.error(
                "Balance sheet as of %s does not balance: assets %s, liabilities and equity %s",
                as_of_date.isoformat(),
                report.total_assets,
                report.total_liabilities_and_equity,
            )
            raise LedgerIntegrityError(
                f"Balance sheet as of {as_of_date.isoformat()} does not balance: "
                f"assets {report.total_assets:.2f} != "
                f"liabilities and equity {report.total_liabilities_and_equity:.2f}"
            )
        return report

    def account_activity(
        self,
        account_id: int,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> AccountActivity:
        """List posted lines for one account with a running balance.

        Balances are in the account's normal-balance sign.

        Raises:
            NotFoundError: If account doesn't exist
        """
        _check_range(start_date, end_date)
        account = self.db.get_account(account_id)
        if account is None:
            raise NotFoundError(account_not_found(account_id))

        opening = ZERO
        if start_date is not None:
            opening = self._balance_through(account, start_date - ONE_DAY)

        running = opening
        rows = []
        for line in self.db.get_posted_lines(account_id, start_date=start_date, end_date=end_date):
            running += account.account_type.signed(line.debit_amount, line.credit_amount)
            rows.append(
                AccountActivityRow(
                    entry_id=line.entry_id,
                    entry_number=line.entry_number,
                    entry_date=line.entry_date,
                    memo=line.memo or line.entry_memo,
                    debit_amount=line.debit_amount,
                    credit_amount=line.credit_amount,
                    balance=running,
                )
            )

        return AccountActivity(
            account=account,
            start_date=start_date,
            end_date=end_date,
            opening_balance=opening,
            rows=tuple(rows),
            closing_balance=running,
        )

    def period_range(self, period_id: int) -> tuple[date, date]:
        """Get the date range of a period for period-scoped reports.

        Raises:
            NotFoundError: If period doesn't exist
        """
        period = self.db.get_period(period_id)
        if period is None:
            raise NotFoundError(period_not_found(period_id))
        return period.start_date, period.end_date

    def fiscal_year_range(self, fiscal_year_id: int) -> tuple[date, date]:
        """Get the date range of a fiscal year.

        Raises:
            NotFoundError: If fiscal year doesn't exist
        """
        fiscal_year = self.db.get_fiscal_year(fiscal_year_id)
        if fiscal_year is None:
            raise NotFoundError(fiscal_year_not_found(fiscal_year_id))
        return fiscal_year.start_date, fiscal_year.end_date

    def _balance_through(self, account: Account, through: date):
        totals = self.db.get_activity_totals(end_date=through, account_ids=[account.id])
        if not totals:
            return ZERO
        return account.account_type.signed(totals[0].debit_total, totals[0].credit_total)
