"""Canonical forms used when comparing contact and company fields."""

from __future__ import annotations

import re

_PHONE_NOISE = re.compile(r"[\s\-().+]")
_WHITESPACE = re.compile(r"\s+")
_CORPORATE_SUFFIX = re.compile(r"[\s,]*\b(?:inc|llc|ltd|corp|company|co)\.?$")
_LEADING_ARTICLE = re.compile(r"^the\s+")
_SCHEME = re.compile(r"^https?://")


def normalize_phone(phone: str | None) -> str:
    if not phone:
        return ""
    return _PHONE_NOISE.sub("", phone)


def normalize_email(email: str | None) -> str:
    if not email:
        return ""
    return email.strip().lower()


def normalize_name(name: str | None) -> str:
    if not name:
        return ""
    return _WHITESPACE.sub(" ", name.strip().lower())


def extract_email_domain(email: str | None) -> str | None:
    """Return the lowercased part after the last ``@``, or None."""
    if not email or "@" not in email:
        return None
    domain = email.rsplit("@", maxsplit=1)[1].strip().lower()
    return domain or None


def normalize_domain(domain: str | None) -> str:
    if not domain:
        return ""
    return domain.strip().lower().removeprefix("www.")


def normalize_website(website: str | None) -> str:
    if not website:
        return ""
    value = _SCHEME.sub("", website.strip().lower())
    return value.removeprefix("www.").removesuffix("/")


def normalize_company_name(name: str | None) -> str:
    """Normalized name without a trailing corporate suffix or leading "the".

    A name that consists only of a suffix ("Company") is left as is rather
    than collapsing to an empty string.
    """
    normalized = normalize_name(name)
    stripped = _CORPORATE_SUFFIX.sub("", normalized)
    stripped = _LEADING_ARTICLE.sub("", stripped).strip()
    return stripped or normalized
