"""
normalize.records
-----------------
Per-origin SourceRecord construction for documents pulled from legacy
collections. This is the only place raw store payloads are inspected; every
record handed to the resolver / merge engine went through `to_source_record`.

- Origin tags the collection family a record came from.
- Identity fields are coerced to strings and blanks dropped, so identity
  comparison downstream is plain equality.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict

from .common import get_path, squash_spaces, to_id
from .validators import is_valid_doc_id, looks_like_email


class Origin(str, Enum):
    USER = "user"
    EMPLOYEE = "employee"
    PROFILE = "profile"
    BALANCE = "balance"
    LEAVE_REQUEST = "leave_request"
    SETTINGS = "settings"
    LEAVE_SETTINGS = "leave_settings"
    DEPARTMENT = "department"
    KEPT = "kept"


# Cross-reference fields compared by the identity resolver, per origin
IDENTITY_FIELDS = {
    Origin.USER: ("email",),
    Origin.EMPLOYEE: ("userId", "email"),
    Origin.PROFILE: ("userId", "employeeId", "email"),
    Origin.BALANCE: ("userId", "employeeId"),
    Origin.LEAVE_REQUEST: ("userId", "employeeId", "managerId"),
    Origin.SETTINGS: (),
    Origin.LEAVE_SETTINGS: (),
    Origin.DEPARTMENT: ("managerId",),
    Origin.KEPT: (),
}


class InvalidRecord(ValueError):
    """Raised when a store document cannot be turned into a SourceRecord."""


@dataclass(frozen=True)
class SourceRecord:
    origin: Origin
    collection: str
    id: str
    data: Dict[str, Any] = field(default_factory=dict)

    def get(self, path: str, default: Any = None) -> Any:
        return get_path(self.data, path, default)


def to_source_record(origin: Origin, collection: str, doc_id: Any,
                     body: Dict[str, Any] | None) -> SourceRecord:
    """
    Validate one raw store document and tag it with its origin.
    The store id is merged into the body under "id" (store id wins).
    """
    rid = to_id(doc_id)
    if not is_valid_doc_id(rid):
        raise InvalidRecord(f"{collection}: unusable document id {doc_id!r}")

    data = copy.deepcopy(dict(body or {}))
    for key in IDENTITY_FIELDS[origin]:
        if key == "email":
            continue
        value = to_id(data.get(key))
        if value is None:
            data.pop(key, None)
        else:
            data[key] = value

    if "email" in IDENTITY_FIELDS[origin]:
        email = squash_spaces(data.get("email")) if isinstance(data.get("email"), str) else None
        if email is None:
            data.pop("email", None)
        else:
            if not looks_like_email(email):
                print(f"   ⚠️ {collection}/{rid}: email {email!r} does not look like an address")
            data["email"] = email

    data["id"] = rid
    return SourceRecord(origin=origin, collection=collection, id=rid, data=data)
