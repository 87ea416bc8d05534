from core.imports import secrets, re

OBJECT_ID_PATTERN = re.compile(r"^[0-9a-fA-F]{24}$")


def generate_object_id():
    """24 hex characters, the id format shared by every table."""
    return secrets.token_hex(12)


def is_valid_object_id(value):
    return isinstance(value, str) and bool(OBJECT_ID_PATTERN.match(value))
