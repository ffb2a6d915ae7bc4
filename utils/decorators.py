from __future__ import annotations

from enum import Enum
from functools import wraps
from typing import Optional

from flask import abort

from models.client import Role
from utils.middleware import SecurityContext, current_security_context


class GuardDecision(str, Enum):
    ALLOWED = "ALLOWED"
    UNAUTHENTICATED = "UNAUTHENTICATED"
    FORBIDDEN = "FORBIDDEN"


def role_satisfies(actual: Role, required: Role) -> bool:
    """ADMIN satisfies every requirement; any other role only itself."""
    return actual == Role.ADMIN or actual == required


def require_role(context: SecurityContext, role: Optional[Role] = None) -> GuardDecision:
    """
    UNAUTHENTICATED when no principal is bound, FORBIDDEN when the bound
    principal's role does not satisfy `role`, ALLOWED otherwise.
    `role=None` only asks for an authenticated principal.
    """
    if not context.is_authenticated:
        return GuardDecision.UNAUTHENTICATED
    if role is None or role_satisfies(context.role, role):
        return GuardDecision.ALLOWED
    return GuardDecision.FORBIDDEN


def enforce(decision: GuardDecision) -> None:
    """Abort with 401 for UNAUTHENTICATED and 403 for FORBIDDEN."""
    if decision is GuardDecision.UNAUTHENTICATED:
        abort(401, description="Authentication required")
    if decision is GuardDecision.FORBIDDEN:
        abort(403, description="Insufficient role")


def login_required():
    """
    Require an authenticated principal. The view receives the request's
    SecurityContext as the `security_context` keyword argument.
    """
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            context = current_security_context()
            enforce(require_role(context))
            return fn(*args, security_context=context, **kwargs)

        return wrapper

    return decorator


def roles_required(role: Role):
    """
    Require a principal whose role satisfies `role`:
    401 when anonymous, 403 when the role falls short.
    """
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            context = current_security_context()
            enforce(require_role(context, role))
            return fn(*args, security_context=context, **kwargs)

        return wrapper

    return decorator
