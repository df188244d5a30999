"""
Operator capability context

There is no global "current admin": every request carries the operator's
email in the X-Operator-Email header and gets an OperatorContext that the
endpoints pass down explicitly.
"""
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Header, HTTPException, status

import config
from utils.logging_utils import log_event


ANONYMOUS_OPERATOR = "anonymous"


@dataclass(frozen=True)
class OperatorContext:
    email: str
    is_admin: bool = False

    @property
    def label(self) -> str:
        return self.email or ANONYMOUS_OPERATOR


def build_operator_context(email: Optional[str]) -> OperatorContext:
    normalized = (email or "").strip().lower()
    return OperatorContext(email=normalized, is_admin=bool(normalized) and normalized in config.ADMIN_EMAILS)


async def get_operator(
    x_operator_email: Optional[str] = Header(None, alias="X-Operator-Email"),
) -> OperatorContext:
    """Operator making the request (may be anonymous)"""
    return build_operator_context(x_operator_email)


async def require_admin(operator: OperatorContext = Depends(get_operator)) -> OperatorContext:
    """Requires an operator listed in ADMIN_EMAILS"""
    if not operator.is_admin:
        log_event("auth", operator.label, "Admin action denied")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin privileges are required for this action"
        )
    return operator
