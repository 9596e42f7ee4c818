#!/usr/bin/env python3
"""
Run one directory sync against the configured domain database and print the summary.

Usage:
    python scripts/sync_directory.py
    python scripts/sync_directory.py --client <directory-record-id>

Exit codes:
    0 - sync finished (per-client errors are printed but do not fail the run)
    1 - fatal error (configuration, directory access, lock held by another run)
"""

import argparse
import asyncio
import sys
from pathlib import Path

# Add src to path for imports
script_dir = Path(__file__).parent.absolute()
project_root = script_dir.parent
src_path = project_root / "src"
sys.path.insert(0, str(src_path))

from loguru import logger  # noqa: E402

from opsdash_api.errors import DirectorySyncError  # noqa: E402
from opsdash_api.main import build_sync_engine  # noqa: E402
from opsdash_api.reconciliation.db.pool import DomainDBPool  # noqa: E402
from opsdash_api.settings import Settings  # noqa: E402

MAX_ERRORS_SHOWN = 5


def print_summary(result) -> None:
    print(
        f"\nSync result: synced={result.synced} created={result.created} "
        f"updated={result.updated} systemsLinked={result.systems_linked} errors={len(result.errors)}"
    )
    if result.errors:
        print("Errors:")
        for error in result.errors[:MAX_ERRORS_SHOWN]:
            print(f" - {error}")
        if len(result.errors) > MAX_ERRORS_SHOWN:
            print(f"... {len(result.errors) - MAX_ERRORS_SHOWN} more")


async def run(client_id: str | None) -> int:
    settings = Settings()
    if not settings.domain_db_connection_string:
        logger.error("DOMAIN_DB_CONNECTION_STRING is not set")
        return 1

    pool = DomainDBPool(settings.domain_db_connection_string)
    await pool.initialize()
    engine = build_sync_engine(settings, pool)

    try:
        if client_id:
            single = await engine.sync_single(client_id)
            print(
                f"\nClient {single.client['name']} synced: is_new={single.is_new} "
                f"systemsLinked={single.systems_linked} trust_center_found={single.trust_center_found}"
            )
        else:
            print_summary(await engine.sync_all())

        status = await engine.status()
        print(f"\nClients: total={status.total_clients} synced={status.synced_clients}")
        return 0
    except DirectorySyncError as e:
        logger.error(f"Directory sync failed: {e}")
        return 1
    finally:
        if engine.downstream_cache is not None:
            await engine.downstream_cache.close()
        await pool.close()


def main() -> None:
    parser = argparse.ArgumentParser(description="Sync clients from the directory-of-record")
    parser.add_argument("--client", help="Sync only this directory record id")
    args = parser.parse_args()
    sys.exit(asyncio.run(run(args.client)))


if __name__ == "__main__":
    main()
