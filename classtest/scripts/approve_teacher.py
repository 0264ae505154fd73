"""
Approve a pending teacher so they can reach the admin dashboard.

Approval has no HTTP route; an operator runs this against the configured
database. The teacher code is published on the teacher's next login.
Usage: python -m classtest.scripts.approve_teacher <uid> [<uid> ...]
       python -m classtest.scripts.approve_teacher --list
"""

import argparse
import asyncio
import sys
from typing import List

from classtest.core.enums import TeacherStatus
from classtest.core.exceptions import ConfigMissing, LookupNotFound
from classtest.core.paths import paths
from classtest.core.tenant_service import approve_teacher
from classtest.db.session import get_store, init_db
from classtest.store.base import DocumentStore


async def list_pending(store: DocumentStore) -> None:
    docs = await store.list(paths.teachers())
    pending = [doc for doc in docs if doc.data.get("status") != TeacherStatus.APPROVED.value]
    if not pending:
        print("No pending teachers.")
        return
    print(f"Found {len(pending)} pending teacher(s):")
    for doc in pending:
        print(f"  {doc.id}  {doc.data.get('email', '')}")


async def approve_all(store: DocumentStore, uids: List[str]) -> int:
    failed = 0
    for uid in uids:
        try:
            teacher = await approve_teacher(store, uid)
        except LookupNotFound:
            print(f"  SKIP: no teacher with uid {uid}", file=sys.stderr)
            failed += 1
            continue
        print(f"  {teacher.email} (uid={uid}) -> approved")
    print(f"Done. Approved {len(uids) - failed} teacher(s).")
    return failed


async def run(args: argparse.Namespace) -> int:
    await init_db()
    store = get_store()
    if args.list:
        await list_pending(store)
        return 0
    return await approve_all(store, args.uids)


def main() -> None:
    parser = argparse.ArgumentParser(description="Approve pending teacher accounts.")
    parser.add_argument("uids", nargs="*", help="Teacher uid(s) to approve")
    parser.add_argument("--list", action="store_true", help="List teachers awaiting approval")
    args = parser.parse_args()
    if not args.list and not args.uids:
        parser.error("give at least one uid, or --list")

    try:
        failed = asyncio.run(run(args))
    except ConfigMissing as e:
        print(e.message, file=sys.stderr)
        sys.exit(2)
    sys.exit(1 if failed else 0)


if __name__ == "__main__":
    main()
