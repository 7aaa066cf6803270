import json

import pytest

from consolidate import rules
from consolidate.merge_engine import (
    MergeContext, build_canonical, merge_by_priority, pick, strip_server_timestamps,
)
from consolidate.steps import build_users
from consolidate.store import SERVER_TIMESTAMP
from normalize import common
from normalize.records import Origin


def test_first_non_empty_candidate_wins(rec, ctx):
    a = rec(Origin.PROFILE, "p1", department="")
    b = rec(Origin.EMPLOYEE, "e1", department="Ops")
    out = merge_by_priority({"a": a, "b": b}, {"department": [("a", "department"), ("b", "department")]},
                            {"department": "none"}, ctx)
    assert out == {"department": "Ops"}


def test_zero_and_empty_list_are_values_not_gaps(rec, ctx):
    a = rec(Origin.PROFILE, "p1", hourlyRate=0, skills=[])
    b = rec(Origin.EMPLOYEE, "e1", hourlyRate=30, skills=["welding"])
    out = merge_by_priority({"a": a, "b": b}, {
        "rate": [("a", "hourlyRate"), ("b", "hourlyRate")],
        "skills": [("a", "skills"), ("b", "skills")],
    }, {}, ctx)
    assert out == {"rate": 0, "skills": []}


def test_precedence_follows_rules_not_argument_order(rec, ctx):
    profile = rec(Origin.PROFILE, "p1", userId="u1", position="Lead")
    employee = rec(Origin.EMPLOYEE, "e1", userId="u1", position="Junior")
    user = rec(Origin.USER, "u1")

    forward = build_canonical("user", {"user": user, "employee": employee, "profile": profile},
                              rules.USER_PRIORITY, rules.USER_DEFAULTS, ctx)
    backward = build_canonical("user", {"profile": profile, "employee": employee, "user": user},
                               rules.USER_PRIORITY, rules.USER_DEFAULTS, ctx)
    assert forward["profile"]["position"] == "Lead"
    assert backward["profile"]["position"] == "Lead"


def test_default_leave_balance_without_balance_source(rec, ctx):
    [doc] = build_users([rec(Origin.USER, "u1", email="a@x.com")], [], [], [], [], ctx)
    assert doc["leaveBalance"] == {
        "year": 2025,
        "vacation": {"total": 22, "used": 0, "available": 22},
        "sick": {"total": 10, "used": 0, "available": 10},
        "personal": {"total": 5, "used": 0, "available": 5},
    }


def test_nested_balance_merges_per_sub_field(rec, ctx):
    user = rec(Origin.USER, "u1")
    balance = rec(Origin.BALANCE, "b1", employeeId="u1", vacationTotal=30,
                  sick={"used": 2}, year=2024)
    doc = build_canonical("user", {"user": user, "balance": balance},
                          rules.USER_PRIORITY, rules.USER_DEFAULTS, ctx)
    assert doc["leaveBalance"]["year"] == 2024
    assert doc["leaveBalance"]["vacation"] == {"total": 30, "used": 0, "available": 22}
    assert doc["leaveBalance"]["sick"] == {"total": 10, "used": 2, "available": 10}


def test_canonical_id_is_primary_id(rec, ctx):
    user = rec(Origin.USER, "u1")
    employee = rec(Origin.EMPLOYEE, "e9", userId="u1")
    doc = build_canonical("user", {"user": user, "employee": employee},
                          rules.USER_PRIORITY, rules.USER_DEFAULTS, ctx)
    assert doc["id"] == "u1"
    assert list(doc)[0] == "id"


def test_missing_primary_is_an_error(ctx):
    with pytest.raises(ValueError):
        build_canonical("user", {"user": None}, rules.USER_PRIORITY, rules.USER_DEFAULTS, ctx)


def test_server_timestamp_only_where_no_source_value(rec, ctx):
    with_date = rec(Origin.USER, "u1", createdAt="2023-01-01")
    without = rec(Origin.USER, "u2")
    docs = build_users([with_date, without], [], [], [], [], ctx)
    assert docs[0]["createdAt"] == "2023-01-01"
    assert docs[1]["createdAt"] is SERVER_TIMESTAMP
    assert "createdAt" not in strip_server_timestamps(docs[1])


def test_merge_is_repeatable_byte_for_byte(rec, ctx):
    def snapshot():
        return (
            [rec(Origin.USER, "u1", email="a@x.com", fullName="Ann")],
            [rec(Origin.EMPLOYEE, "e1", userId="u1", skills=["a"], emergencyContact={"name": "Bo"})],
            [rec(Origin.PROFILE, "p1", email="a@x.com", bio="hi")],
            [],
            [rec(Origin.BALANCE, "b1", userId="u1", personalUsed=1)],
        )

    first = build_users(*snapshot(), ctx)
    second = build_users(*snapshot(), ctx)
    dump = lambda docs: json.dumps(strip_server_timestamps(docs), sort_keys=True)
    assert dump(first) == dump(second)


def test_clock_defaults_come_from_context(rec):
    from datetime import datetime
    user = rec(Origin.USER, "u1")
    a = build_canonical("user", {"user": user}, rules.USER_PRIORITY, rules.USER_DEFAULTS,
                        MergeContext(now=datetime(2030, 1, 2)))
    assert a["profile"]["hireDate"] == "2030-01-02T00:00:00"
    assert a["leaveBalance"]["year"] == 2030


def test_defaults_are_not_shared_between_documents(rec, ctx):
    docs = build_users([rec(Origin.USER, "u1"), rec(Origin.USER, "u2")], [], [], [], [], ctx)
    docs[0]["profile"]["skills"].append("x")
    docs[0]["profile"]["emergencyContact"]["name"] = "changed"
    assert docs[1]["profile"]["skills"] == []
    assert rules.EMERGENCY_CONTACT_DEFAULT["name"] == ""


def test_pick_and_get_path_share_the_missing_marker(rec):
    user = rec(Origin.USER, "u1", email="")
    assert pick({"user": user}, [("user", "email"), ("user", "profile.bio")]) is common._MISSING
