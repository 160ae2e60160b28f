#!/usr/bin/env python3
"""Seed PostgreSQL with borrowers, loans and payment schedules.

Borrowers get realistic identities and loans backdated up to a year, so
the database holds a mix of settled and upcoming installments. Every loan
goes through the regular origination workflow.
"""

import argparse
import sys
import time
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from loan_tracker.config import LoanTrackerConfig, SeedConfig
from loan_tracker.exceptions import LoanTrackerError
from loan_tracker.logging import get_logger, setup_logging
from loan_tracker.scenarios import LoanBookScenario
from loan_tracker.store import PostgresLoanStore

logger = get_logger(__name__)


def print_summary(summary: dict[str, int], elapsed: float) -> None:
    """Log final row counts."""
    logger.info("=" * 60)
    logger.info("Seeding complete! (%.1fs total)", elapsed)
    logger.info("=" * 60)
    logger.info("  - Borrowers:    %d", summary["borrowers"])
    logger.info("  - Loans:        %d", summary["loans"])
    logger.info("  - Installments: %d", summary["installments"])
    logger.info("=" * 60)


def main() -> None:
    """Main entry point."""
    config = LoanTrackerConfig.from_env()

    parser = argparse.ArgumentParser(
        description="Seed PostgreSQL with borrowers, loans and payment schedules"
    )
    parser.add_argument(
        "--borrowers",
        type=int,
        default=config.seeding.num_borrowers,
        help=f"Number of borrowers to create (default: {config.seeding.num_borrowers})",
    )
    parser.add_argument(
        "--loans",
        type=int,
        default=config.seeding.num_loans,
        help=f"Total number of loans to create (default: {config.seeding.num_loans})",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=config.seed,
        help="Random seed for reproducibility",
    )
    parser.add_argument(
        "--postgres-url",
        type=str,
        default=config.postgres.connection_string,
        help="PostgreSQL connection string",
    )
    parser.add_argument(
        "--teardown",
        action="store_true",
        default=config.seeding.teardown,
        help="Delete all existing data before seeding",
    )
    parser.add_argument(
        "--no-auto-settle",
        action="store_true",
        help="Leave past-due installments unpaid instead of settling them on their due date",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=config.log_level,
        help="Log level (default: INFO)",
    )
    parser.add_argument(
        "--log-format",
        type=str,
        choices=["standard", "json"],
        default=config.log_format,
        help="Log output format",
    )
    args = parser.parse_args()

    setup_logging(level=args.log_level, format_type=args.log_format)

    try:
        seeding = SeedConfig(
            num_borrowers=args.borrowers,
            num_loans=args.loans,
            teardown=args.teardown,
            auto_settle_past_due=config.seeding.auto_settle_past_due and not args.no_auto_settle,
            max_backdate_days=config.seeding.max_backdate_days,
        )

        with PostgresLoanStore(args.postgres_url) as store:
            logger.info("Connected to database")
            store.create_tables()

            if seeding.teardown:
                logger.info("Tearing down existing data...")
                store.truncate()

            logger.info(
                "Starting seed: %d borrowers, %d loans", seeding.num_borrowers, seeding.num_loans
            )
            t0 = time.perf_counter()
            scenario = LoanBookScenario(config=seeding, seed=args.seed, repository=store)
            scenario.generate()
            print_summary(store.summary(), time.perf_counter() - t0)
    except LoanTrackerError as e:
        logger.error("Seeding failed: %s", e)
        sys.exit(1)


if __name__ == "__main__":
    main()
