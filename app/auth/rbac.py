from fastapi import Depends, HTTPException, status

from app.auth.dependencies import get_current_user
from app.auth.schemas import CurrentUser

SUPER_ADMIN_SLUG = "super-admin"


def check_permission(module: str, action: str):
    """
    Dependency factory to enforce a specific permission.

    Example:
        Depends(check_permission("fees", "create"))   # requires "fees.create"
    """
    required = f"{module}.{action}"

    async def _checker(current_user: CurrentUser = Depends(get_current_user)) -> None:
        if current_user.role_slug == SUPER_ADMIN_SLUG:
            return
        if required not in (current_user.permissions or []):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permissions",
            )

    return _checker


# Permission catalog: every (module, action) pair is one global Permission row.
PERMISSION_MODULES = [
    ("settings", "School settings, roles and users"),
    ("academics", "Sessions, classes, sections and subjects"),
    ("students", "Students, admissions and parents"),
    ("staff", "Staff, departments and designations"),
    ("attendance", "Student and staff attendance"),
    ("fees", "Fee types, groups, assignment and collection"),
    ("exams", "Exams, schedules and results"),
    ("library", "Books, members and issues"),
    ("transport", "Vehicles, routes and pickup points"),
    ("homework", "Homework and submissions"),
    ("front_office", "Complaints, enquiries, visitors, calls and postal"),
]
PERMISSION_ACTIONS = ("view", "create", "edit", "delete")


def permission_catalog():
    """Yield (name, slug, module, description) for every catalog permission."""
    for module, label in PERMISSION_MODULES:
        for action in PERMISSION_ACTIONS:
            yield f"{module}.{action}", f"{module}-{action}".replace("_", "-"), module, f"{action.title()}: {label}"
