"""
Role metadata.

Each role lives in its own MongoDB collection and carries a slightly
different field set. Everything role-specific the auth layer needs is
declared here so the service and routes stay generic.
"""

from dataclasses import dataclass, field
from typing import Dict, FrozenSet, List, Tuple

# Fields every account may carry
BASE_FIELDS: Tuple[str, ...] = (
    "name",
    "email",
    "password",
    "phone",
    "year",
    "course",
    "cgpa",
    "skills",
    # staff fields (optional for students)
    "employeeId",
    "department",
    "designation",
    "specialization",
    "experience",
)

# Written only by the server
RESET_FIELDS: Tuple[str, ...] = ("resetPasswordToken", "resetPasswordExpire")


@dataclass(frozen=True)
class RoleSpec:
    key: str                 # singular key, stored in `role` and used in responses
    path: str                # URL segment: /api/<path>/...
    collection: str          # MongoDB collection name
    excluded_fields: FrozenSet[str] = frozenset()
    extra_fields: Tuple[str, ...] = ()
    server_owned: FrozenSet[str] = frozenset()
    defaults: Dict[str, str] = field(default_factory=dict)

    @property
    def fields(self) -> Tuple[str, ...]:
        names = [f for f in BASE_FIELDS if f not in self.excluded_fields]
        return tuple(names) + self.extra_fields

    def writable_fields(self) -> FrozenSet[str]:
        """Fields a client may set through register/update."""
        return frozenset(self.fields) - self.server_owned

    def filter_payload(self, payload: Dict) -> Dict:
        allowed = self.writable_fields()
        return {k: v for k, v in payload.items() if k in allowed}


STUDENT = RoleSpec(key="student", path="students", collection="students")

FACULTY = RoleSpec(key="faculty", path="faculty", collection="faculties")

# TPO documents never carry `experience`
TPO = RoleSpec(
    key="tpo",
    path="tpo",
    collection="tpos",
    excluded_fields=frozenset({"experience"}),
)

# Admins have no `department` and always an `accessLevel`
ADMIN = RoleSpec(
    key="admin",
    path="admin",
    collection="admins",
    excluded_fields=frozenset({"department"}),
    extra_fields=("accessLevel",),
    server_owned=frozenset({"accessLevel"}),
    defaults={"accessLevel": "Full"},
)

# Lookup order matters: role-agnostic login and the email check probe in this order
ROLES: List[RoleSpec] = [STUDENT, FACULTY, TPO, ADMIN]
