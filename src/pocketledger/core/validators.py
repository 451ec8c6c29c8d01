# File: src/pocketledger/core/validators.py
"""Reusable validation utilities for form input."""

import re

EMAIL_LOCAL_PART_MAX_LENGTH = 64
CATEGORY_NAME_MAX_LENGTH = 50

_EMAIL_SHAPE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
_EMAIL_LOCAL_FORBIDDEN = re.compile(r'[<>()\[\]\\,;:\s"]')


def validate_email(value: str | None) -> str:
    """
    Validate email format, one rule at a time.

    Each failing rule raises with its own message so the login form can
    tell the user exactly what to fix.

    Args:
        value: Email to validate

    Returns:
        Stripped email

    Raises:
        ValueError: If format is invalid
    """
    if not value or not value.strip():
        raise ValueError("Email address is required")

    cleaned = value.strip()

    if "@" not in cleaned:
        raise ValueError("Email address must contain @")

    parts = cleaned.split("@")
    if len(parts) != 2:
        raise ValueError("Invalid email format")

    local_part, domain_part = parts

    if not local_part.strip():
        raise ValueError("There must be text before the @ sign")

    if len(local_part) > EMAIL_LOCAL_PART_MAX_LENGTH:
        raise ValueError("The part before the @ sign is too long")

    if not domain_part.strip():
        raise ValueError("There must be a domain after the @ sign")

    if "." not in domain_part:
        raise ValueError("Domain must contain a dot (.)")

    domain_labels = domain_part.split(".")
    if len(domain_labels[-1]) < 2:
        raise ValueError("Invalid domain extension")

    if not _EMAIL_SHAPE.match(cleaned):
        raise ValueError("Invalid email format")

    if _EMAIL_LOCAL_FORBIDDEN.search(local_part):
        raise ValueError("Email contains invalid characters")

    if ".." in local_part or ".." in domain_part:
        raise ValueError("Email cannot contain consecutive dots")

    # Leading/trailing dots on either side of the @
    if (
        local_part.startswith(".")
        or local_part.endswith(".")
        or domain_part.startswith(".")
        or domain_part.endswith(".")
    ):
        raise ValueError("Email cannot start or end with a dot")

    return cleaned


def is_valid_email(value: str | None) -> bool:
    """Quick boolean form of validate_email."""
    try:
        validate_email(value)
    except ValueError:
        return False
    return True


def validate_category_name(value: str | None) -> str:
    """
    Validate a category name from the add/edit form.

    Returns:
        Stripped name

    Raises:
        ValueError: If empty or too long
    """
    if not value or not value.strip():
        raise ValueError("Please enter a category name")

    cleaned = value.strip()

    if len(cleaned) > CATEGORY_NAME_MAX_LENGTH:
        raise ValueError(f"Category name cannot exceed {CATEGORY_NAME_MAX_LENGTH} characters")

    return cleaned
