"""Field rule tables for usernames, email addresses and passwords.

These tables are the single source of truth for the registration rules. The validators
check them and `describe_rules()` renders them for clients and docs, so the wording a
user sees is always the wording the code enforces. Bump RULESET_VERSION whenever a rule
or its limits change.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Tuple


RULESET_VERSION = "field_rules_v1"


USERNAME_MIN_LEN = 6
USERNAME_MAX_LEN = 20

EMAIL_DOMAIN_MAX_LEN = 255
EMAIL_LOCAL_MAX_LEN = 64
EMAIL_MIN_DOMAIN_LEVELS = 2
EMAIL_DOMAIN_SYMBOLS = ".-"
EMAIL_LOCAL_SYMBOLS = "_.!#$%&-"

PASSWORD_MIN_LEN = 8
PASSWORD_MAX_LEN = 32
PASSWORD_SYMBOLS = "!@#$%^&*+=?"


@dataclass(frozen=True)
class Rule:
    field: str
    key: str
    message: str

    def __str__(self) -> str:
        return self.message


# -----------------
# Username
# -----------------
USERNAME_TYPE = Rule("username", "type", "Username must be a string.")
USERNAME_LENGTH = Rule(
    "username",
    "length",
    f"Username must be between {USERNAME_MIN_LEN} and {USERNAME_MAX_LEN} characters long.",
)
USERNAME_CHARSET = Rule(
    "username",
    "charset",
    "Username may only contain letters, numbers, and underscores.",
)
USERNAME_LEADING_UNDERSCORE = Rule(
    "username",
    "leading_underscore",
    "Username may not start with an underscore.",
)

# -----------------
# Email
# -----------------
EMAIL_TYPE = Rule("email", "type", "Email must be a string.")
EMAIL_FORMAT = Rule(
    "email",
    "format",
    "Email must be in the format prefix@domain, with exactly one '@'.",
)
EMAIL_DOMAIN_LENGTH = Rule(
    "email",
    "domain_length",
    f"Email domain may not be longer than {EMAIL_DOMAIN_MAX_LEN} characters.",
)
EMAIL_DOMAIN_CHARSET = Rule(
    "email",
    "domain_charset",
    "Email domain may only contain letters, numbers, dots, and dashes.",
)
EMAIL_DOMAIN_LEVELS = Rule(
    "email",
    "domain_levels",
    f"Email domain must have at least {EMAIL_MIN_DOMAIN_LEVELS} levels, separated by a dot.",
)
EMAIL_DOMAIN_CONSECUTIVE = Rule(
    "email",
    "domain_consecutive_symbols",
    "Email domain may not contain consecutive dots or dashes.",
)
EMAIL_DOMAIN_EDGE = Rule(
    "email",
    "domain_edge_symbol",
    "Email domain may not start or end with a dot or a dash.",
)
EMAIL_LOCAL_LENGTH = Rule(
    "email",
    "prefix_length",
    f"Email prefix may not be longer than {EMAIL_LOCAL_MAX_LEN} characters.",
)
EMAIL_LOCAL_CHARSET = Rule(
    "email",
    "prefix_charset",
    f"Email prefix may only contain letters, numbers, and the symbols {' '.join(EMAIL_LOCAL_SYMBOLS)}",
)
EMAIL_LOCAL_EDGE = Rule(
    "email",
    "prefix_edge_symbol",
    "Email prefix may not start or end with a symbol.",
)
EMAIL_LOCAL_CONSECUTIVE = Rule(
    "email",
    "prefix_consecutive_symbols",
    "Email prefix may not contain consecutive symbols.",
)

# -----------------
# Password
# -----------------
PASSWORD_TYPE = Rule("password", "type", "Password must be a string.")
PASSWORD_LENGTH = Rule(
    "password",
    "length",
    f"Password must be between {PASSWORD_MIN_LEN} and {PASSWORD_MAX_LEN} characters long.",
)
PASSWORD_UPPERCASE = Rule(
    "password",
    "uppercase",
    "Password must contain at least one uppercase letter.",
)
PASSWORD_LOWERCASE = Rule(
    "password",
    "lowercase",
    "Password must contain at least one lowercase letter.",
)
PASSWORD_DIGIT = Rule("password", "digit", "Password must contain at least one number.")
PASSWORD_SYMBOL = Rule(
    "password",
    "symbol",
    f"Password must contain at least one of the symbols {' '.join(PASSWORD_SYMBOLS)}",
)
PASSWORD_FORBIDDEN = Rule(
    "password",
    "forbidden_characters",
    f"Password may only contain letters, numbers, and the symbols {' '.join(PASSWORD_SYMBOLS)} (no spaces).",
)


# -----------------
# Profile (free text, only the type is checked)
# -----------------
FIRST_NAME_TYPE = Rule("first_name", "type", "First name must be a string.")
LAST_NAME_TYPE = Rule("last_name", "type", "Last name must be a string.")
JOB_TITLE_TYPE = Rule("job_title", "type", "Job title must be a string.")


# Field -> rules in the order they are checked and reported.
FIELD_RULES: Dict[str, Tuple[Rule, ...]] = {
    "username": (
        USERNAME_TYPE,
        USERNAME_LENGTH,
        USERNAME_CHARSET,
        USERNAME_LEADING_UNDERSCORE,
    ),
    "email": (
        EMAIL_TYPE,
        EMAIL_FORMAT,
        EMAIL_DOMAIN_LENGTH,
        EMAIL_DOMAIN_CHARSET,
        EMAIL_DOMAIN_LEVELS,
        EMAIL_DOMAIN_CONSECUTIVE,
        EMAIL_DOMAIN_EDGE,
        EMAIL_LOCAL_LENGTH,
        EMAIL_LOCAL_CHARSET,
        EMAIL_LOCAL_EDGE,
        EMAIL_LOCAL_CONSECUTIVE,
    ),
    "password": (
        PASSWORD_TYPE,
        PASSWORD_LENGTH,
        PASSWORD_UPPERCASE,
        PASSWORD_LOWERCASE,
        PASSWORD_DIGIT,
        PASSWORD_SYMBOL,
        PASSWORD_FORBIDDEN,
    ),
}


def describe_rules() -> Dict[str, object]:
    """Human-readable rule listing, e.g. for a signup form or API docs.

    The type rules are implied by any client and are left out.
    """
    fields: Dict[str, List[str]] = {}
    for name, rules in FIELD_RULES.items():
        fields[name] = [r.message for r in rules if r.key != "type"]
    return {"version": RULESET_VERSION, "fields": fields}
