from enum import Enum
from typing import Dict, List


class Resource(str, Enum):
    INVENTORY = "inventory"
    CERTIFICATES = "certificates"
    TREATMENTS = "treatments"
    USERS = "users"
    REPORTS = "reports"


class Action(str, Enum):
    READ = "read"
    WRITE = "write"
    DELETE = "delete"


ROLE_ADMIN = "admin"
ROLE_USER = "user"

# Conjunto de roles válidos en TODO el sistema
ALLOWED_ROLES = {ROLE_ADMIN, ROLE_USER}

ADMIN_PERMISSIONS: Dict[str, List[str]] = {
    "inventory": ["read", "write", "delete"],
    "certificates": ["read", "write", "delete"],
    "treatments": ["read", "write", "delete"],
    "users": ["read", "write", "delete"],
    "reports": ["read", "write"],
}

USER_PERMISSIONS: Dict[str, List[str]] = {
    "inventory": ["read", "write"],
    "certificates": ["read", "write"],
    "treatments": ["read", "write"],
    "reports": ["read"],
}


def default_permissions(role: str) -> Dict[str, List[str]]:
    source = ADMIN_PERMISSIONS if role == ROLE_ADMIN else USER_PERMISSIONS
    return {resource: list(actions) for resource, actions in source.items()}
