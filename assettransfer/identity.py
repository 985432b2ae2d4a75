"""
identity.py - Caller principal extraction

The platform hands every invocation an X.509-derived identity descriptor:

    x509::CN=alice,OU=client,O=Org1::CN=ca.org1.example.com,O=org1.example.com

The first distinguished name is the certificate subject, the second is the
issuing CA. The principal is the subject's common name qualified by the
issuer's organization: "alice@org1.example.com". A subject CN that already
carries a domain ("User1@org1.example.com") contributes only "User1".

This is format parsing only. The platform has already authenticated the
certificate; nothing here verifies signatures.
"""

from __future__ import annotations
import re
from typing import Dict

from .core import MalformedIdentity


_TOKEN_PREFIX = "x509::"
_PRINCIPAL_RE = re.compile(r"^[^@\s]+@[^@\s]+$")


def _parse_dn(dn: str) -> Dict[str, str]:
    """Parse "CN=a,OU=b,O=c" (or "/CN=a/OU=b") into an attribute dict."""
    dn = dn.strip()
    if dn.startswith("/"):
        parts = dn[1:].split("/")
    else:
        parts = dn.split(",")
    attrs: Dict[str, str] = {}
    for part in parts:
        part = part.strip()
        if not part:
            continue
        name, sep, value = part.partition("=")
        if not sep or not name.strip() or not value.strip():
            raise MalformedIdentity(f"Malformed distinguished name attribute {part!r}")
        # First occurrence wins; OU may legitimately repeat.
        attrs.setdefault(name.strip().upper(), value.strip())
    return attrs


def resolve(token: str) -> str:
    """
    Resolve a caller-identity token into a "name@organization" principal.

    Args:
        token: Identity descriptor supplied by the platform.

    Returns:
        The caller principal.

    Raises:
        MalformedIdentity: If the token does not have the expected shape.
    """
    if not isinstance(token, str) or not token.startswith(_TOKEN_PREFIX):
        raise MalformedIdentity(f"Unrecognised caller identity {token!r}")
    subject_dn, sep, issuer_dn = token[len(_TOKEN_PREFIX):].partition("::")
    if not sep:
        raise MalformedIdentity(f"Caller identity {token!r} has no issuer")

    subject = _parse_dn(subject_dn)
    issuer = _parse_dn(issuer_dn)

    # "User1@org1.example.com" -> "User1"
    name = subject.get("CN", "").partition("@")[0]
    if not name:
        raise MalformedIdentity(f"Caller identity {token!r} has no subject CN")

    organization = issuer.get("O")
    if not organization:
        ca_name = issuer.get("CN", "")
        organization = ca_name[3:] if ca_name.lower().startswith("ca.") else ca_name
    if not organization:
        raise MalformedIdentity(f"Caller identity {token!r} has no issuer organization")

    principal = f"{name}@{organization}"
    if not is_principal(principal):
        raise MalformedIdentity(f"Caller identity {token!r} yields invalid principal {principal!r}")
    return principal


def is_principal(value: str) -> bool:
    """Return True if value is syntactically "name@organization"."""
    return isinstance(value, str) and bool(_PRINCIPAL_RE.match(value))


def make_token(name: str, organization: str, unit: str = "client") -> str:
    """
    Build the identity token the platform would supply for name@organization.

    Used by the in-memory harness and tests; inverse of resolve().
    """
    return f"{_TOKEN_PREFIX}CN={name},OU={unit}::CN=ca.{organization},O={organization}"
