"""
guard.py - Ownership checks before mutation

Only the strict policy exists: the resolved caller must equal the expected
owner exactly. A token that cannot be resolved is an authorization failure.
"""

from __future__ import annotations
import logging

from . import identity
from .core import Context, MalformedIdentity, Unauthorized

logger = logging.getLogger(__name__)


def caller_principal(ctx: Context) -> str:
    """Resolve the invocation's caller, logging malformed tokens."""
    try:
        return identity.resolve(ctx.caller)
    except MalformedIdentity as exc:
        logger.warning("Rejected caller identity: %s", exc,
                       extra={"tx_id": ctx.tx_id, "error_code": exc.code})
        raise


def require_owner(ctx: Context, expected_owner: str) -> str:
    """
    Require the invocation's caller to be expected_owner.

    Returns:
        The resolved caller principal.

    Raises:
        MalformedIdentity: If the caller token does not parse.
        Unauthorized: If the caller is someone else.
    """
    principal = caller_principal(ctx)
    if principal != expected_owner:
        logger.warning(
            "Caller %s is not %s", principal, expected_owner,
            extra={"principal": principal, "tx_id": ctx.tx_id, "error_code": Unauthorized.code},
        )
        raise Unauthorized(f"Caller {principal} is not {expected_owner}")
    return principal
