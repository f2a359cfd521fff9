"""Degrade-to-demo-data policy applied at the presentation boundary.

Read paths call ``load_or_fallback`` so a ``DataAccessError`` yields the demo
dataset plus a diagnostic string; write paths only use ``error_details``
because nothing may be fabricated on a failed write.
"""

from __future__ import annotations
from dataclasses import dataclass
import logging
from typing import Callable, Generic, Optional, TypeVar

from expense_portal.core.errors import DataAccessError

logger = logging.getLogger("app.degrade")

T = TypeVar("T")

DEMO_DATA_ERROR = "Database connection failed - showing demo data"
PAGE_DEMO_DATA_ERROR = "Unable to connect to database - showing demo data"

AUTH_KEYWORDS = ("managed identity", "authentication", "login failed", "token")

IDENTITY_FIX_HINT = (
    "MANAGED IDENTITY FIX:\n"
    "1. Ensure the managed identity is assigned to the App Service\n"
    "2. Grant the identity a database role (db_datareader, db_datawriter, execute)\n"
    "3. Verify the AZURE_CLIENT_ID app setting matches the managed identity client ID\n"
    "4. If running locally, sign in with 'az login' and use 'Authentication=Active Directory Default'"
)


def is_auth_failure(exc: BaseException) -> bool:
    message = str(exc).lower()
    return any(keyword in message for keyword in AUTH_KEYWORDS)


def error_details(exc: BaseException) -> str:
    """Diagnostic text for a failed store call, with a fix hint for auth errors."""
    details = f"Error Type: {type(exc).__name__}\nMessage: {exc}"
    procedure = getattr(exc, "procedure", None)
    if procedure:
        details += f"\nProcedure: {procedure}"
    if is_auth_failure(exc):
        details += f"\n\n{IDENTITY_FIX_HINT}"
    return details


@dataclass
class FallbackResult(Generic[T]):
    data: T
    degraded: bool = False
    error: Optional[str] = None
    error_details: Optional[str] = None


def load_or_fallback(
    loader: Callable[[], T],
    fallback: Callable[[], T],
    what: str,
    error: str = DEMO_DATA_ERROR,
) -> FallbackResult[T]:
    try:
        return FallbackResult(data=loader())
    except DataAccessError as exc:
        logger.error("error loading %s; serving demo data", what, exc_info=exc)
        return FallbackResult(
            data=fallback(),
            degraded=True,
            error=error,
            error_details=error_details(exc),
        )
