"""Security utilities: session tokens, hashing, invite code generation."""

import hashlib
import hmac
import secrets

# Alphabet for generated invite codes — no 0/O or 1/I look-alikes
INVITE_CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"


# ── Session tokens (SHA-256, deterministic for lookups) ──────

def generate_session_token() -> str:
    """Generate a cryptographically secure 256-bit session token (64 hex chars)."""
    return secrets.token_hex(32)


def hash_session_token(raw_token: str) -> str:
    """One-way SHA-256 hash for session token storage.

    SHA-256 rather than a password hash: tokens are looked up by hash on
    every request and carry 256 bits of entropy already.
    """
    return hashlib.sha256(raw_token.encode()).hexdigest()


def token_prefix(raw_token: str) -> str:
    """First 8 chars, safe to log and store for identification."""
    return raw_token[:8]


def constant_time_equals(a: str, b: str) -> bool:
    return hmac.compare_digest(a.encode(), b.encode())


# ── Invite codes ─────────────────────────────────────────────

def generate_invite_code(slug: str, length: int = 4) -> str:
    """Build a code like ``ACME-7X9K`` from a tenant slug."""
    prefix = "".join(c for c in slug.upper() if c.isalnum())[:4] or "CODE"
    suffix = "".join(secrets.choice(INVITE_CODE_ALPHABET) for _ in range(length))
    return f"{prefix}-{suffix}"
