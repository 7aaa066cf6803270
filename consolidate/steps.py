"""
consolidate.steps
-----------------
The migration steps. Each `build_*` function is pure (records in, canonical
documents out); `MigrationSteps` wires them to the reader, writer and store
and returns the number of documents each step produced.
"""

from __future__ import annotations

import copy
from typing import Any, Dict, List, Optional, Sequence

from normalize.records import Origin, SourceRecord

from . import rules
from .batch_writer import BatchWriter
from .identity import has_match, resolve
from .merge_engine import MergeContext, build_canonical, merge_by_priority
from .reader import CollectionReader, NotFound
from .store import SERVER_TIMESTAMP, DocumentStore


# ---------- Users ----------

def _first(*records: Optional[SourceRecord]) -> Optional[SourceRecord]:
    for rec in records:
        if rec is not None:
            return rec
    return None


def _previous_employee_only(user: SourceRecord,
                            users: Sequence[SourceRecord],
                            employees: Sequence[SourceRecord]) -> Optional[SourceRecord]:
    """
    The employee an earlier run built this canonical user document from, or
    None. Such a document has the employee's id and a nested profile, and no
    other user links to that employee.
    """
    if not isinstance(user.get("profile"), dict):
        return None
    employee = next((e for e in employees if e.id == user.id), None)
    if employee is None or employee.get("userId") == user.id:
        return None
    others = [u for u in users if u.id != user.id]
    if has_match(employee, others, rules.EMPLOYEE_HAS_USER, rules.EMPLOYEE_KEY_PRIORITY):
        return None
    return employee


def _employee_only_user(employee: SourceRecord,
                        previous: Optional[SourceRecord],
                        profiles: Sequence[SourceRecord],
                        leave_balances: Sequence[SourceRecord],
                        employee_leave_balances: Sequence[SourceRecord],
                        ctx: MergeContext) -> Dict[str, Any]:
    m = rules.EMPLOYEE_ONLY_MATCH
    profile, emp_bal, bal = resolve(employee, [
        (profiles, m["profile"]),
        (employee_leave_balances, m["employeeLeaveBalances"]),
        (leave_balances, m["leaveBalances"]),
    ], rules.USER_KEY_PRIORITY)
    sources = {"employee": employee, "profile": profile, "balance": _first(emp_bal, bal),
               "user": previous}
    return build_canonical("employee", sources, rules.EMPLOYEE_ONLY_PRIORITY,
                           rules.EMPLOYEE_ONLY_DEFAULTS, ctx)


def build_users(users: Sequence[SourceRecord],
                employees: Sequence[SourceRecord],
                profiles: Sequence[SourceRecord],
                leave_balances: Sequence[SourceRecord],
                employee_leave_balances: Sequence[SourceRecord],
                ctx: MergeContext) -> List[Dict[str, Any]]:
    """
    One canonical user per user record, then one per employee record that
    has no user account. A canonical id is emitted at most once.

    Re-running over the output of an earlier run gives the same documents:
    a user document that an earlier run built for an employee without an
    account is rebuilt from that employee again.
    """
    out: List[Dict[str, Any]] = []
    seen = set()
    rebuilt = set()

    m = rules.USER_MATCH
    for user in users:
        previous_of = _previous_employee_only(user, users, employees)
        if previous_of is not None:
            doc = _employee_only_user(previous_of, user, profiles, leave_balances,
                                      employee_leave_balances, ctx)
            rebuilt.add(previous_of.id)
        else:
            employee, profile, bal, emp_bal = resolve(user, [
                (employees, m["employee"]),
                (profiles, m["profile"]),
                (leave_balances, m["leaveBalances"]),
                (employee_leave_balances, m["employeeLeaveBalances"]),
            ], rules.USER_KEY_PRIORITY)
            sources = {"user": user, "employee": employee, "profile": profile,
                       "balance": _first(bal, emp_bal)}
            doc = build_canonical("user", sources, rules.USER_PRIORITY, rules.USER_DEFAULTS, ctx)
        if doc["id"] in seen:
            continue
        seen.add(doc["id"])
        out.append(doc)

    for employee in employees:
        if employee.id in rebuilt:
            continue
        if has_match(employee, users, rules.EMPLOYEE_HAS_USER, rules.EMPLOYEE_KEY_PRIORITY):
            continue
        if employee.id in seen:
            print(f"   ⚠️ Employee {employee.id} has no matching user but its id is already taken, skipped")
            continue
        doc = _employee_only_user(employee, None, profiles, leave_balances,
                                  employee_leave_balances, ctx)
        seen.add(doc["id"])
        out.append(doc)

    return out


# ---------- Leave requests ----------

def build_leave_requests(*request_sets: Sequence[SourceRecord],
                         ctx: MergeContext) -> List[Dict[str, Any]]:
    """Merge request collections in order; the first record per id wins."""
    out: List[Dict[str, Any]] = []
    seen = set()
    for requests in request_sets:
        for request in requests:
            if request.id in seen:
                continue
            seen.add(request.id)
            out.append(build_canonical("request", {"request": request},
                                       rules.LEAVE_REQUEST_PRIORITY,
                                       rules.LEAVE_REQUEST_DEFAULTS, ctx))
    return out


# ---------- Settings ----------

def _section(record: SourceRecord) -> Dict[str, Any]:
    body = dict(record.data)
    body.pop("id", None)
    return body


def build_settings(settings: Sequence[SourceRecord],
                   leave_settings: Sequence[SourceRecord],
                   departments: Optional[Sequence[SourceRecord]],
                   ctx: MergeContext) -> Dict[str, Any]:
    """
    The singleton settings document. A previous run's canonical document is
    only used for sections no legacy source provides. `departments=None`
    means the departments collection was not found.
    """
    existing = next((s for s in settings if s.id == rules.GLOBAL_SETTINGS_ID), None)
    legacy = [s for s in settings if s.id != rules.GLOBAL_SETTINGS_ID]

    def from_existing(section, default):
        value = existing.get(section) if existing is not None else None
        return value if value is not None else default

    general = _section(legacy[0]) if legacy else from_existing("general", rules.GENERAL_SETTINGS_DEFAULT)
    leave = (_section(leave_settings[0]) if leave_settings
             else from_existing("leave", rules.LEAVE_SETTINGS_DEFAULT))

    if departments is None:
        dept_list = from_existing("departments", [])
    else:
        dept_list = []
        for dept in departments:
            entry = {"id": dept.id}
            entry.update(merge_by_priority({"department": dept}, rules.DEPARTMENT_PRIORITY,
                                           rules.DEPARTMENT_DEFAULTS, ctx))
            dept_list.append(entry)

    return build_canonical_settings(general, leave, dept_list,
                                    from_existing("system", rules.SYSTEM_SETTINGS_DEFAULT))


def build_canonical_settings(general, leave, departments, system) -> Dict[str, Any]:
    return copy.deepcopy({
        "id": rules.GLOBAL_SETTINGS_ID,
        "general": general,
        "leave": leave,
        "departments": departments,
        "system": system,
        "updatedAt": SERVER_TIMESTAMP,
    })


# ---------- Wiring ----------

class MigrationSteps:
    # steps that only read; their counts stay out of the migrated total
    READ_ONLY_STEPS = ("verify",)

    def __init__(self, store: DocumentStore, ctx: MergeContext, dry_run: bool = False,
                 users_batch_size: int = rules.USERS_BATCH_SIZE,
                 requests_batch_size: int = rules.LEAVE_REQUESTS_BATCH_SIZE):
        self._store = store
        self._reader = CollectionReader(store)
        self._writer = BatchWriter(store, dry_run=dry_run)
        self.ctx = ctx
        self.dry_run = dry_run
        self.users_batch_size = users_batch_size
        self.requests_batch_size = requests_batch_size

    def migrate_users(self) -> int:
        print("\n📦 MIGRATING USERS COLLECTION...")
        read = self._reader.records
        docs = build_users(
            read(rules.USERS, Origin.USER),
            read(rules.EMPLOYEES, Origin.EMPLOYEE),
            read(rules.EMPLOYEE_PROFILES, Origin.PROFILE),
            read(rules.LEAVE_BALANCES, Origin.BALANCE),
            read(rules.EMPLOYEE_LEAVE_BALANCES, Origin.BALANCE),
            self.ctx,
        )
        report = self._writer.write(docs, rules.USERS, self.users_batch_size)
        print(f"   ✅ Migrated {report.total} users")
        return report.total

    def migrate_leave_requests(self) -> int:
        print("\n📦 MIGRATING LEAVE REQUESTS...")
        read = self._reader.records
        docs = build_leave_requests(
            read(rules.LEAVE_REQUESTS, Origin.LEAVE_REQUEST),
            read(rules.MANAGER_LEAVE_REQUESTS, Origin.LEAVE_REQUEST),
            ctx=self.ctx,
        )
        report = self._writer.write(docs, rules.LEAVE_REQUESTS, self.requests_batch_size)
        print(f"   ✅ Migrated {report.total} leave requests")
        return report.total

    def migrate_settings(self) -> int:
        print("\n📦 MIGRATING SETTINGS...")
        read = self._reader.records
        dept_result = self._reader.read(rules.DEPARTMENTS, Origin.DEPARTMENT)
        if isinstance(dept_result, NotFound):
            print(f"   ⚠️ Collection {rules.DEPARTMENTS} not found or empty, keeping existing list")
            departments = None
        else:
            departments = dept_result.records

        doc = build_settings(
            read(rules.SETTINGS, Origin.SETTINGS),
            read(rules.LEAVE_SETTINGS, Origin.LEAVE_SETTINGS),
            departments,
            self.ctx,
        )
        if not self.dry_run:
            self._store.upsert(rules.SETTINGS, doc["id"], doc)
        print(f"   ✅ Migrated settings with {len(doc['departments'])} departments")
        return 1

    def verify_existing_collections(self) -> int:
        print("\n📦 VERIFYING EXISTING COLLECTIONS...")
        total = 0
        for name in rules.KEPT_COLLECTIONS:
            result = self._reader.read(name, Origin.KEPT)
            if isinstance(result, NotFound):
                print(f"   ⚠️ {name}: empty or not found")
                continue
            count = len(result.records)
            total += count
            print(f"   ✅ {name}: {count} documents (keeping as-is)")
        return total

    def default_steps(self, verify: bool = True):
        steps = [
            ("users", self.migrate_users),
            ("leave requests", self.migrate_leave_requests),
            ("settings", self.migrate_settings),
        ]
        if verify:
            steps.append(("verify", self.verify_existing_collections))
        return steps
