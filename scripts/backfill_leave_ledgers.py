# Upgrade employee documents written by the previous portal backend to the current schema:
# version field, ledger defaults, and a stable requestId on every stored leave request.
# Usage: set env MONGODB_URI and MONGODB_DB_NAME, then run from a machine with access
# Example: python scripts/backfill_leave_ledgers.py [--dry-run]

import sys

from pymongo import MongoClient

from crewconnect.core.config import settings
from crewconnect.core.db import upgrade_legacy_employee

dry_run = "--dry-run" in sys.argv[1:]

client = MongoClient(settings.MONGODB_URI)
db = client[settings.MONGODB_DB_NAME]
employees = db[settings.EMPLOYEES_COLLECTION]

scanned = 0
upgraded = 0
for doc in employees.find({}):
    scanned += 1
    updates = upgrade_legacy_employee(doc, default_total_leave=settings.DEFAULT_TOTAL_LEAVE)
    if not updates:
        continue
    upgraded += 1
    if not dry_run:
        # leaveRequests 배열을 통째로 교체하므로, 그 사이 다른 쓰기가 없었을 때만 적용
        version_filter = doc["version"] if "version" in doc else {"$exists": False}
        employees.update_one({"_id": doc["_id"], "version": version_filter}, {"$set": updates})

mode = "would upgrade" if dry_run else "upgraded"
print(f"Scanned {scanned} employee documents, {mode} {upgraded}")
