"""PostgreSQL repository backed by psycopg."""

from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any

import psycopg
from psycopg import errors
from psycopg.rows import dict_row

from loan_tracker.exceptions import (
    DuplicateError,
    EntityNotFoundError,
    InvalidEntityStateError,
    ReferentialIntegrityError,
    StorageError,
)
from loan_tracker.models import Borrower, Installment, Loan, LoanStatus
from loan_tracker.store.base import LoanRepository, status_value

logger = logging.getLogger(__name__)

SCHEMA = [
    """
    CREATE TABLE IF NOT EXISTS borrowers (
        id BIGSERIAL PRIMARY KEY,
        name TEXT NOT NULL,
        email TEXT NOT NULL UNIQUE,
        phone TEXT NOT NULL,
        created_at TIMESTAMPTZ NOT NULL DEFAULT now()
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS loans (
        id BIGSERIAL PRIMARY KEY,
        borrower_id BIGINT NOT NULL REFERENCES borrowers (id) ON DELETE CASCADE,
        principal NUMERIC NOT NULL CHECK (principal > 0),
        annual_rate NUMERIC NOT NULL CHECK (annual_rate >= 0),
        term_months INTEGER NOT NULL CHECK (term_months > 0),
        day_due INTEGER NOT NULL CHECK (day_due BETWEEN 1 AND 31),
        status TEXT NOT NULL,
        date_taken TIMESTAMPTZ NOT NULL,
        created_at TIMESTAMPTZ NOT NULL DEFAULT now()
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS installments (
        id BIGSERIAL PRIMARY KEY,
        loan_id BIGINT NOT NULL REFERENCES loans (id) ON DELETE CASCADE,
        installment_number INTEGER NOT NULL,
        amount_due NUMERIC NOT NULL,
        amount_paid NUMERIC NOT NULL DEFAULT 0,
        due_date DATE NOT NULL,
        paid_date DATE,
        created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
        UNIQUE (loan_id, installment_number)
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_loans_borrower_id ON loans (borrower_id)",
    "CREATE INDEX IF NOT EXISTS idx_loans_status ON loans (status)",
]

# Timestamps come back in the session time zone
SESSION_OPTIONS = "-c TimeZone=UTC"

BORROWER_COLUMNS = "id AS borrower_id, name, email, phone, created_at"
LOAN_COLUMNS = (
    "id AS loan_id, borrower_id, principal, annual_rate, term_months, "
    "day_due, status, date_taken, created_at"
)
INSTALLMENT_COLUMNS = (
    "id AS installment_id, loan_id, installment_number, amount_due, "
    "amount_paid, due_date, paid_date, created_at"
)


class PostgresLoanStore(LoanRepository):
    """Repository over the ``borrowers``, ``loans`` and ``installments`` tables.

    The connection runs in autocommit mode: each create is durable on its
    own, so a multi-step origination that fails partway leaves the rows
    already written in place.

    Parameters
    ----------
    connection_string : str | None
        PostgreSQL connection string.
    connection : psycopg.Connection | None
        Existing connection to use instead of opening one.
    """

    def __init__(
        self,
        connection_string: str | None = None,
        *,
        connection: psycopg.Connection | None = None,
    ) -> None:
        if connection is None:
            if connection_string is None:
                raise ValueError("Either connection_string or connection is required")
            try:
                connection = psycopg.connect(
                    connection_string, autocommit=True, options=SESSION_OPTIONS
                )
            except psycopg.Error as exc:
                raise StorageError(f"error connecting to database: {exc}") from exc
        self._conn = connection

    def close(self) -> None:
        """Close the underlying connection."""
        self._conn.close()

    def __enter__(self) -> PostgresLoanStore:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def _execute(self, operation: str, query: str, params: tuple = ()) -> list[dict[str, Any]]:
        """Run one statement and return its rows as dicts."""
        try:
            with self._conn.cursor(row_factory=dict_row) as cur:
                cur.execute(query, params)
                if cur.description is None:
                    return []
                return cur.fetchall()
        except errors.UniqueViolation as exc:
            raise DuplicateError(f"failed to {operation}: {exc}") from exc
        except errors.ForeignKeyViolation as exc:
            raise ReferentialIntegrityError(f"failed to {operation}: {exc}") from exc
        except psycopg.Error as exc:
            logger.warning("PostgreSQL error during %s: %s", operation, exc)
            raise StorageError(f"failed to {operation}: {exc}") from exc

    def _fetch_one(self, operation: str, query: str, params: tuple, missing: str) -> dict[str, Any]:
        rows = self._execute(operation, query, params)
        if not rows:
            raise EntityNotFoundError(missing)
        return rows[0]

    def _count(self, operation: str, query: str, params: tuple = ()) -> int:
        return self._execute(operation, query, params)[0]["count"]

    def create_tables(self) -> None:
        """Create the schema if it does not exist."""
        for statement in SCHEMA:
            self._execute("create tables", statement)
        logger.info("Ensured loan-tracker tables exist")

    # Borrowers
    def create_borrower(self, name: str, email: str, phone: str) -> Borrower:
        row = self._execute(
            "create borrower",
            f"INSERT INTO borrowers (name, email, phone) VALUES (%s, %s, %s) RETURNING {BORROWER_COLUMNS}",
            (name, email, phone),
        )[0]
        return _borrower_from_row(row)

    def get_borrower(self, borrower_id: int) -> Borrower:
        row = self._fetch_one(
            "get borrower",
            f"SELECT {BORROWER_COLUMNS} FROM borrowers WHERE id = %s",
            (borrower_id,),
            f"Borrower {borrower_id} not found",
        )
        return _borrower_from_row(row)

    def get_borrower_by_email(self, email: str) -> Borrower:
        row = self._fetch_one(
            "get borrower by email",
            f"SELECT {BORROWER_COLUMNS} FROM borrowers WHERE email = %s",
            (email,),
            f"Borrower with email {email!r} not found",
        )
        return _borrower_from_row(row)

    def get_borrower_by_phone(self, phone: str) -> Borrower:
        row = self._fetch_one(
            "get borrower by phone",
            f"SELECT {BORROWER_COLUMNS} FROM borrowers WHERE phone = %s ORDER BY id LIMIT 1",
            (phone,),
            f"Borrower with phone {phone!r} not found",
        )
        return _borrower_from_row(row)

    def update_borrower(self, borrower_id: int, name: str, email: str, phone: str) -> Borrower:
        row = self._fetch_one(
            "update borrower",
            f"UPDATE borrowers SET name = %s, email = %s, phone = %s WHERE id = %s "
            f"RETURNING {BORROWER_COLUMNS}",
            (name, email, phone, borrower_id),
            f"Borrower {borrower_id} not found",
        )
        return _borrower_from_row(row)

    def list_borrowers(self) -> list[Borrower]:
        rows = self._execute(
            "list borrowers", f"SELECT {BORROWER_COLUMNS} FROM borrowers ORDER BY name, id"
        )
        return [_borrower_from_row(row) for row in rows]

    def count_borrowers(self) -> int:
        return self._count("count borrowers", "SELECT COUNT(*) AS count FROM borrowers")

    def delete_borrower(self, borrower_id: int) -> None:
        self._fetch_one(
            "delete borrower",
            "DELETE FROM borrowers WHERE id = %s RETURNING id",
            (borrower_id,),
            f"Borrower {borrower_id} not found",
        )

    # Loans
    def create_loan(
        self,
        borrower_id: int,
        principal: Decimal,
        annual_rate: Decimal,
        term_months: int,
        day_due: int,
        status: LoanStatus | str,
        date_taken: datetime,
    ) -> Loan:
        row = self._execute(
            f"create loan for borrower {borrower_id}",
            "INSERT INTO loans (borrower_id, principal, annual_rate, term_months, day_due, status, date_taken) "
            f"VALUES (%s, %s, %s, %s, %s, %s, %s) RETURNING {LOAN_COLUMNS}",
            (borrower_id, principal, annual_rate, term_months, day_due, status_value(status), date_taken),
        )[0]
        return _loan_from_row(row)

    def get_loan(self, loan_id: int) -> Loan:
        row = self._fetch_one(
            "get loan",
            f"SELECT {LOAN_COLUMNS} FROM loans WHERE id = %s",
            (loan_id,),
            f"Loan {loan_id} not found",
        )
        return _loan_from_row(row)

    def get_loans_by_borrower(self, borrower_id: int) -> list[Loan]:
        rows = self._execute(
            f"get loans for borrower {borrower_id}",
            f"SELECT {LOAN_COLUMNS} FROM loans WHERE borrower_id = %s ORDER BY id",
            (borrower_id,),
        )
        return [_loan_from_row(row) for row in rows]

    def update_loan(self, loan_id: int, *, status: LoanStatus | str) -> Loan:
        row = self._fetch_one(
            "update loan",
            f"UPDATE loans SET status = %s WHERE id = %s RETURNING {LOAN_COLUMNS}",
            (status_value(status), loan_id),
            f"Loan {loan_id} not found",
        )
        return _loan_from_row(row)

    def list_loans(self) -> list[Loan]:
        rows = self._execute("list loans", f"SELECT {LOAN_COLUMNS} FROM loans ORDER BY id")
        return [_loan_from_row(row) for row in rows]

    def get_loans_by_status(self, status: LoanStatus | str) -> list[Loan]:
        rows = self._execute(
            "get loans by status",
            f"SELECT {LOAN_COLUMNS} FROM loans WHERE status = %s ORDER BY id",
            (status_value(status),),
        )
        return [_loan_from_row(row) for row in rows]

    def count_loans_by_status(self, status: LoanStatus | str) -> int:
        return self._count(
            "count loans by status",
            "SELECT COUNT(*) AS count FROM loans WHERE status = %s",
            (status_value(status),),
        )

    def delete_loan(self, loan_id: int) -> None:
        self._fetch_one(
            "delete loan",
            "DELETE FROM loans WHERE id = %s RETURNING id",
            (loan_id,),
            f"Loan {loan_id} not found",
        )

    # Installments
    def create_installment(
        self,
        loan_id: int,
        installment_number: int,
        amount_due: Decimal,
        amount_paid: Decimal,
        due_date: date,
        paid_date: date | None,
    ) -> Installment:
        row = self._execute(
            f"create installment {installment_number} for loan {loan_id}",
            "INSERT INTO installments (loan_id, installment_number, amount_due, amount_paid, due_date, paid_date) "
            f"VALUES (%s, %s, %s, %s, %s, %s) RETURNING {INSTALLMENT_COLUMNS}",
            (loan_id, installment_number, amount_due, amount_paid, due_date, paid_date),
        )[0]
        return _installment_from_row(row)

    def get_installment(self, installment_id: int) -> Installment:
        row = self._fetch_one(
            "get installment",
            f"SELECT {INSTALLMENT_COLUMNS} FROM installments WHERE id = %s",
            (installment_id,),
            f"Installment {installment_id} not found",
        )
        return _installment_from_row(row)

    def get_installments_by_loan(self, loan_id: int) -> list[Installment]:
        rows = self._execute(
            f"get installments for loan {loan_id}",
            f"SELECT {INSTALLMENT_COLUMNS} FROM installments WHERE loan_id = %s "
            "ORDER BY installment_number",
            (loan_id,),
        )
        return [_installment_from_row(row) for row in rows]

    def get_unpaid_installments_by_loan(self, loan_id: int) -> list[Installment]:
        rows = self._execute(
            f"get unpaid installments for loan {loan_id}",
            f"SELECT {INSTALLMENT_COLUMNS} FROM installments "
            "WHERE loan_id = %s AND amount_paid < amount_due ORDER BY installment_number",
            (loan_id,),
        )
        return [_installment_from_row(row) for row in rows]

    def update_installment(
        self,
        installment_id: int,
        amount_paid: Decimal,
        paid_date: date | None,
    ) -> Installment:
        if amount_paid < 0:
            raise InvalidEntityStateError(
                f"Installment {installment_id} cannot have a negative amount paid"
            )
        row = self._fetch_one(
            "update installment",
            f"UPDATE installments SET amount_paid = %s, paid_date = %s WHERE id = %s "
            f"RETURNING {INSTALLMENT_COLUMNS}",
            (amount_paid, paid_date, installment_id),
            f"Installment {installment_id} not found",
        )
        return _installment_from_row(row)

    def list_installments(self) -> list[Installment]:
        rows = self._execute(
            "list installments",
            f"SELECT {INSTALLMENT_COLUMNS} FROM installments ORDER BY loan_id, installment_number",
        )
        return [_installment_from_row(row) for row in rows]

    def delete_installment(self, installment_id: int) -> None:
        self._fetch_one(
            "delete installment",
            "DELETE FROM installments WHERE id = %s RETURNING id",
            (installment_id,),
            f"Installment {installment_id} not found",
        )

    def summary(self) -> dict[str, int]:
        """Return row counts of all tables."""
        return {
            table: self._count(f"count {table}", f"SELECT COUNT(*) AS count FROM {table}")  # noqa: S608
            for table in ("borrowers", "loans", "installments")
        }

    def truncate(self) -> None:
        for table in ("installments", "loans", "borrowers"):
            self._execute(f"delete from {table}", f"DELETE FROM {table}")  # noqa: S608
        logger.info("Deleted all borrowers, loans and installments")


def _parse_status(value: str) -> LoanStatus | str:
    try:
        return LoanStatus(value)
    except ValueError:
        return value


def _utc(moment: datetime) -> datetime:
    return moment.astimezone(timezone.utc)


def _borrower_from_row(row: dict[str, Any]) -> Borrower:
    return Borrower(**{**row, "created_at": _utc(row["created_at"])})


def _loan_from_row(row: dict[str, Any]) -> Loan:
    return Loan(
        **{
            **row,
            "status": _parse_status(row["status"]),
            "date_taken": _utc(row["date_taken"]),
            "created_at": _utc(row["created_at"]),
        }
    )


def _installment_from_row(row: dict[str, Any]) -> Installment:
    return Installment(**{**row, "created_at": _utc(row["created_at"])})
