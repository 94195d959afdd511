# bookstore/auth.py
"""
Caller identity and write authorization.

Identity resolution maps the request token (``Authorization: Bearer <t>``
or the legacy ``x-auth-token`` header) to a ``CallerIdentity`` through a
static token table read from ``BOOKSTORE_API_TOKENS``. Issuing tokens is
somebody else's job; this module only looks them up.

The authorization gate decides whether an identity may run a mutation.
Every mutation class needs the ``admin`` role, and a missing identity is
always ``Unauthorized``, never elevated.
"""

from __future__ import annotations

import logging
import secrets
import threading
from typing import Dict, Optional

from fastapi import Depends, Header
from typing_extensions import Literal

from . import config
from .errors import Forbidden, Unauthorized
from .models import CallerIdentity, Role


logger = logging.getLogger(__name__)

MutationAction = Literal["create", "update", "delete"]

FORBIDDEN_MESSAGES = {
    "create": "Only admin can add books",
    "update": "Only admin can update books",
    "delete": "Only admin can delete books",
}


# ---------------------------------------------------------------------------
# Identity resolution
# ---------------------------------------------------------------------------

def parse_token_table(raw: str) -> Dict[str, CallerIdentity]:
    """Parse ``"token:user_id:role,..."`` into a token -> identity map.

    ``role`` may be ``admin``/``standard`` or the numeric flag ``1``/``0``.
    Raises ``ValueError`` on malformed entries.
    """
    table: Dict[str, CallerIdentity] = {}
    for chunk in (raw or "").split(","):
        chunk = chunk.strip()
        if not chunk:
            continue
        parts = chunk.split(":")
        if len(parts) != 3 or not parts[0] or not parts[1]:
            raise ValueError("Token entries must look like token:user_id:role")
        token, user_id, role = parts
        table[token] = CallerIdentity(user_id=user_id, role=Role.parse(role))
    return table


class StaticTokenResolver:
    """Resolve bearer tokens against a fixed table."""

    def __init__(self, tokens: Dict[str, CallerIdentity]):
        self._tokens = dict(tokens)

    def resolve(self, token: Optional[str]) -> Optional[CallerIdentity]:
        if not token:
            return None
        found = None
        # compare against every entry so timing does not depend on the match
        for known, identity in self._tokens.items():
            if secrets.compare_digest(known.encode("utf-8"), token.encode("utf-8")):
                found = identity
        return found


_resolver: Optional[StaticTokenResolver] = None
_resolver_lock = threading.Lock()


def get_identity_resolver() -> StaticTokenResolver:
    global _resolver
    with _resolver_lock:
        if _resolver is None:
            tokens = parse_token_table(config.API_TOKENS)
            if not tokens:
                logger.warning("BOOKSTORE_API_TOKENS is empty; every write will be rejected")
            _resolver = StaticTokenResolver(tokens)
        return _resolver


def extract_token(authorization: Optional[str], x_auth_token: Optional[str] = None) -> Optional[str]:
    if authorization:
        scheme, _, value = authorization.strip().partition(" ")
        if scheme.lower() == "bearer" and value.strip():
            return value.strip()
    if x_auth_token and x_auth_token.strip():
        return x_auth_token.strip()
    return None


def get_caller(
    authorization: Optional[str] = Header(default=None),
    x_auth_token: Optional[str] = Header(default=None),
    resolver: StaticTokenResolver = Depends(get_identity_resolver),
) -> CallerIdentity:
    """FastAPI dependency returning the authenticated caller or failing 401."""
    token = extract_token(authorization, x_auth_token)
    if token is None:
        raise Unauthorized()
    identity = resolver.resolve(token)
    if identity is None:
        raise Unauthorized("Token is not valid")
    return identity


# ---------------------------------------------------------------------------
# Authorization gate
# ---------------------------------------------------------------------------

def is_allowed(caller: Optional[CallerIdentity], action: MutationAction) -> bool:
    if action not in FORBIDDEN_MESSAGES:
        raise ValueError(f"Unknown mutation action: {action!r}")
    return caller is not None and caller.is_admin


def authorize(caller: Optional[CallerIdentity], action: MutationAction) -> CallerIdentity:
    """Return ``caller`` if it may perform ``action``.

    Raises ``Unauthorized`` without an identity and ``Forbidden`` for
    non-admin roles.
    """
    if caller is None:
        raise Unauthorized()
    if not is_allowed(caller, action):
        logger.warning("Denied %s for user %s (role=%s)", action, caller.user_id, caller.role.value)
        raise Forbidden(FORBIDDEN_MESSAGES[action])
    return caller
