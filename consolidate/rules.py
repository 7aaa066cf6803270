"""
consolidate.rules
-----------------
Collection names, identity key maps, per-field source priority and defaults.

- *_PRIORITY map a canonical (dotted) field to the ordered (source, path)
  candidates; the first present, non-empty value wins.
- *_DEFAULTS give the value used when no candidate has one. Callables are
  evaluated as fn(sources, ctx).
- The existing-user and employee-only tables intentionally differ in which
  source wins for the same field. Keep them separate.
"""

from .store import SERVER_TIMESTAMP

# ---------- Collections ----------

USERS = "users"
EMPLOYEES = "employees"
EMPLOYEE_PROFILES = "employeeProfiles"
LEAVE_BALANCES = "leaveBalances"
EMPLOYEE_LEAVE_BALANCES = "employeeLeaveBalances"
LEAVE_REQUESTS = "leaveRequests"
MANAGER_LEAVE_REQUESTS = "managerLeaveRequests"
SETTINGS = "settings"
LEAVE_SETTINGS = "leaveSettings"
DEPARTMENTS = "departments"

# Kept as-is, only verified
KEPT_COLLECTIONS = [
    "workTickets",
    "timeEntries",
    "payrollEntries",
    "notifications",
    "goals",
]

# Everything a backup should capture before migrating
BACKUP_COLLECTIONS = [
    DEPARTMENTS,
    EMPLOYEE_LEAVE_BALANCES,
    EMPLOYEE_PROFILES,
    EMPLOYEES,
    "goals",
    LEAVE_BALANCES,
    LEAVE_REQUESTS,
    LEAVE_SETTINGS,
    MANAGER_LEAVE_REQUESTS,
    "notifications",
    "payrollEntries",
    "profileChangeLogs",
    "reports",
    SETTINGS,
    "timeEntries",
    USERS,
    "workTickets",
]

GLOBAL_SETTINGS_ID = "global-settings"

# ---------- Batching ----------

USERS_BATCH_SIZE = 500
# Leave requests stay under the 500 limit with headroom
LEAVE_REQUESTS_BATCH_SIZE = 400

# ---------- Identity ----------

USER_KEY_PRIORITY = ["id", "email"]

USER_MATCH = {
    "employee": {"id": ["userId"], "email": ["email"]},
    "profile": {"id": ["userId", "employeeId"], "email": ["email"]},
    "leaveBalances": {"id": ["employeeId", "userId"]},
    "employeeLeaveBalances": {"id": ["employeeId", "userId"]},
}

# employee (primary) -> users: does this employee already have an account?
EMPLOYEE_KEY_PRIORITY = ["userId", "email"]
EMPLOYEE_HAS_USER = {"userId": ["id"], "email": ["email"]}

EMPLOYEE_ONLY_MATCH = {
    "profile": {"id": ["employeeId"], "email": ["email"]},
    "employeeLeaveBalances": {"id": ["employeeId"]},
    "leaveBalances": {"id": ["employeeId"]},
}

# ---------- Defaults ----------

LEAVE_TYPE_DEFAULTS = {
    "vacation": 22,
    "sick": 10,
    "personal": 5,
}


def current_year(sources, ctx):
    return ctx.now.year


def today_iso(sources, ctx):
    return ctx.now.isoformat()


def synthetic_email(sources, ctx):
    return f"{sources['employee'].id}@company.com"


EMERGENCY_CONTACT_DEFAULT = {"name": "", "phone": "", "relationship": ""}


def _leave_balance_defaults():
    out = {"leaveBalance.year": current_year}
    for kind, days in LEAVE_TYPE_DEFAULTS.items():
        out[f"leaveBalance.{kind}.total"] = days
        out[f"leaveBalance.{kind}.used"] = 0
        out[f"leaveBalance.{kind}.available"] = days
    return out


# ---------- Users (primary: users) ----------

USER_PRIORITY = {
    "email": [("user", "email"), ("employee", "email"), ("profile", "email")],
    "role": [("user", "role"), ("employee", "role")],
    "createdAt": [("user", "createdAt")],

    # a previous run moved fullName under profile; keep it ahead of the secondaries
    "profile.fullName": [("user", "fullName"), ("user", "profile.fullName"), ("profile", "fullName"),
                         ("employee", "name"), ("user", "name")],
    "profile.department": [("profile", "department"), ("employee", "department"),
                           ("user", "department"), ("user", "profile.department")],
    "profile.position": [("profile", "position"), ("employee", "position"),
                         ("user", "position"), ("user", "profile.position")],
    "profile.hourlyRate": [("profile", "hourlyRate"), ("employee", "hourlyRate"),
                           ("user", "hourlyRate"), ("user", "profile.hourlyRate")],
    "profile.hireDate": [("profile", "hireDate"), ("employee", "hireDate"),
                         ("user", "hireDate"), ("user", "profile.hireDate")],
    "profile.phone": [("profile", "phone"), ("employee", "phone"),
                      ("user", "phone"), ("user", "profile.phone")],
    "profile.address": [("profile", "address"), ("employee", "address"),
                        ("user", "profile.address")],
    "profile.skills": [("profile", "skills"), ("employee", "skills"),
                       ("user", "profile.skills")],
    "profile.emergencyContact": [("profile", "emergencyContact"), ("employee", "emergencyContact"),
                                 ("user", "profile.emergencyContact")],
    "profile.avatar": [("profile", "avatar"), ("user", "avatar"), ("user", "profile.avatar")],
    "profile.bio": [("profile", "bio"), ("user", "profile.bio")],
    "profile.status": [("profile", "status"), ("employee", "status"), ("user", "profile.status")],

    "leaveBalance.year": [("balance", "year"), ("user", "leaveBalance.year")],
}

for _kind in LEAVE_TYPE_DEFAULTS:
    for _part in ("total", "used", "available"):
        USER_PRIORITY[f"leaveBalance.{_kind}.{_part}"] = [
            ("balance", f"{_kind}{_part.capitalize()}"),
            ("balance", f"{_kind}.{_part}"),
            ("user", f"leaveBalance.{_kind}.{_part}"),
        ]

USER_DEFAULTS = {
    "email": "",
    "role": "employee",
    "createdAt": SERVER_TIMESTAMP,
    "profile.fullName": "",
    "profile.department": "",
    "profile.position": "",
    "profile.hourlyRate": 0,
    "profile.hireDate": today_iso,
    "profile.phone": "",
    "profile.address": "",
    "profile.skills": [],
    "profile.emergencyContact": EMERGENCY_CONTACT_DEFAULT,
    "profile.avatar": "",
    "profile.bio": "",
    "profile.status": "active",
    **_leave_balance_defaults(),
}

# ---------- Users (primary: employees with no account) ----------

# "user" here is this employee's document from a previous run, if any
EMPLOYEE_ONLY_PRIORITY = {
    "email": [("employee", "email"), ("user", "email")],
    "role": [("employee", "role"), ("user", "role")],
    "createdAt": [("employee", "createdAt"), ("user", "createdAt")],

    "profile.fullName": [("employee", "name"), ("profile", "fullName"), ("user", "profile.fullName")],
    "profile.department": [("employee", "department"), ("profile", "department"),
                           ("user", "profile.department")],
    "profile.position": [("employee", "position"), ("profile", "position"),
                         ("user", "profile.position")],
    "profile.hourlyRate": [("employee", "hourlyRate"), ("profile", "hourlyRate"),
                           ("user", "profile.hourlyRate")],
    "profile.hireDate": [("employee", "hireDate"), ("profile", "hireDate"),
                         ("user", "profile.hireDate")],
    "profile.phone": [("employee", "phone"), ("profile", "phone"), ("user", "profile.phone")],
    "profile.address": [("employee", "address"), ("profile", "address"), ("user", "profile.address")],
    "profile.skills": [("employee", "skills"), ("profile", "skills"), ("user", "profile.skills")],
    "profile.emergencyContact": [("employee", "emergencyContact"), ("profile", "emergencyContact"),
                                 ("user", "profile.emergencyContact")],
    "profile.avatar": [("employee", "avatar"), ("profile", "avatar"), ("user", "profile.avatar")],
    "profile.bio": [("profile", "bio"), ("user", "profile.bio")],
    "profile.status": [("employee", "status"), ("user", "profile.status")],

    "leaveBalance.year": [("balance", "year"), ("user", "leaveBalance.year")],
}

# flat balance fields only on this path
for _kind in LEAVE_TYPE_DEFAULTS:
    for _part in ("total", "used", "available"):
        EMPLOYEE_ONLY_PRIORITY[f"leaveBalance.{_kind}.{_part}"] = [
            ("balance", f"{_kind}{_part.capitalize()}"),
            ("user", f"leaveBalance.{_kind}.{_part}"),
        ]

EMPLOYEE_ONLY_DEFAULTS = {
    **USER_DEFAULTS,
    "email": synthetic_email,
}

# ---------- Leave requests ----------

LEAVE_REQUEST_PRIORITY = {
    "employeeId": [("request", "employeeId"), ("request", "userId")],
    "employeeName": [("request", "employeeName")],
    "type": [("request", "type"), ("request", "leaveType")],
    "status": [("request", "status")],
    "dates.start": [("request", "startDate"), ("request", "dates.start")],
    "dates.end": [("request", "endDate"), ("request", "dates.end")],
    "days": [("request", "days"), ("request", "totalDays")],
    "metadata.reason": [("request", "reason"), ("request", "description"),
                        ("request", "metadata.reason")],
    "metadata.managerComment": [("request", "managerComment"), ("request", "managerNotes"),
                                ("request", "metadata.managerComment")],
    "metadata.submittedAt": [("request", "submittedAt"), ("request", "createdAt"),
                             ("request", "metadata.submittedAt")],
    "metadata.reviewedAt": [("request", "reviewedAt"), ("request", "metadata.reviewedAt")],
    "metadata.reviewedBy": [("request", "reviewedBy"), ("request", "managerId"),
                            ("request", "metadata.reviewedBy")],
}

LEAVE_REQUEST_DEFAULTS = {
    "employeeId": "",
    "employeeName": "",
    "type": "vacation",
    "status": "pending",
    "dates.start": "",
    "dates.end": "",
    "days": 1,
    "metadata.reason": "",
    "metadata.managerComment": "",
    "metadata.submittedAt": SERVER_TIMESTAMP,
    "metadata.reviewedAt": None,
    "metadata.reviewedBy": None,
}

# ---------- Settings ----------

DEPARTMENT_PRIORITY = {
    "name": [("department", "name"), ("department", "departmentName")],
    "managerId": [("department", "managerId"), ("department", "manager")],
    "budget": [("department", "budget")],
    "headcount": [("department", "headcount"), ("department", "employeeCount")],
    "description": [("department", "description")],
    "createdAt": [("department", "createdAt")],
}

DEPARTMENT_DEFAULTS = {
    "name": "",
    "managerId": "",
    "budget": 0,
    "headcount": 0,
    "description": "",
    "createdAt": today_iso,
}

GENERAL_SETTINGS_DEFAULT = {
    "companyName": "Nano Computing ICT Solutions",
    "timezone": "Africa/Addis_Ababa",
    "currency": "ETB",
    "dateFormat": "DD/MM/YYYY",
    "workingHours": {"start": "09:00", "end": "18:00"},
    "workDays": ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday"],
}

LEAVE_SETTINGS_DEFAULT = {
    "vacationDays": 22,
    "sickDays": 10,
    "personalDays": 5,
    "carryOverLimit": 5,
    "advanceNotice": 7,
    "maxConsecutiveDays": 15,
    "blackoutDates": [],
    "approvalLevels": 1,
}

SYSTEM_SETTINGS_DEFAULT = {
    "maintenanceMode": False,
    "allowRegistration": True,
    "requireEmailVerification": True,
    "passwordPolicy": {
        "minLength": 8,
        "requireUppercase": True,
        "requireNumbers": True,
        "requireSpecialChars": True,
    },
    "sessionTimeout": 3600000,  # ms
    "maxLoginAttempts": 5,
}
