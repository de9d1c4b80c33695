#!/usr/bin/env python3
"""
Local-to-Cloud Job Migration Script

Copies every job from the configured local store into cloud storage for
one user. Local data is left in place unless --clear is given AND every
job migrated successfully.

Usage:
    # Migrate and keep local data
    python scripts/migrate_local_to_remote.py --user-id user-42

    # Migrate, then clear local data on full success
    python scripts/migrate_local_to_remote.py --user-id user-42 --clear

    # Only report what would be migrated
    python scripts/migrate_local_to_remote.py --user-id user-42 --dry-run
"""

import asyncio
import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from jobtracker.config import Settings, get_settings
from jobtracker.database import create_session_factory, init_db
from jobtracker.errors import with_retry
from jobtracker.schemas import MigrationResult
from jobtracker.services.key_value import get_key_value_store
from jobtracker.services.local_storage import LocalStorageService
from jobtracker.services.migration import MigrationService
from jobtracker.services.remote_storage import RemoteStorageBackend

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)


async def run_migration(
    user_id: str,
    clear: bool = False,
    dry_run: bool = False,
    settings: Optional[Settings] = None,
) -> MigrationResult:
    settings = settings or get_settings()
    local_service = LocalStorageService(
        get_key_value_store(settings),
        storage_key=settings.local_store_key,
    )

    engine, session_factory = create_session_factory(settings.database_url)
    try:
        # Connection errors from the cloud database are retried
        await with_retry(lambda: init_db(engine))
        migration = MigrationService(
            local_service,
            remote_factory=lambda uid: RemoteStorageBackend(uid, session_factory),
        )

        count = migration.get_local_job_count()
        logger.info(f"Found {count} local jobs")

        if dry_run or count == 0:
            return MigrationResult(success=True, total_count=count)

        result = await migration.migrate_to_cloud(user_id)
        for error in result.errors:
            logger.error(f"  {error}")

        if clear and result.success:
            migration.clear_local_data()
            logger.info("Local job data cleared")
        elif clear:
            logger.warning("Migration incomplete; local job data kept")

        return result
    finally:
        await engine.dispose()


async def main() -> None:
    parser = argparse.ArgumentParser(description="Migrate local jobs to cloud storage")
    parser.add_argument("--user-id", required=True, help="Owner identity for migrated jobs")
    parser.add_argument("--clear", action="store_true", help="Clear local data after full success")
    parser.add_argument("--dry-run", action="store_true", help="Count local jobs only")

    args = parser.parse_args()

    result = await run_migration(args.user_id, clear=args.clear, dry_run=args.dry_run)

    logger.info("\n=== Migration Complete ===")
    logger.info(f"Migrated: {result.migrated_count}/{result.total_count}")
    if not result.success:
        sys.exit(1)


if __name__ == "__main__":
    asyncio.run(main())
