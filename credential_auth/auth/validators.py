"""Syntactic validation of registration fields.

Every validator reports all rules the value breaks, not just the first, so a client can
show every problem in one round trip. Uniqueness is not checked here; that only happens
at insert time, in the store.
"""

from __future__ import annotations

import re
from typing import Any, List

from credential_auth.auth import rules as R
from credential_auth.models import CompositeValidation, ValidationResult


_USERNAME_CHARSET_RE = re.compile(r"[A-Za-z0-9_]*")

_DOMAIN_CHARSET_RE = re.compile(r"[A-Za-z0-9.\-]*")
_DOMAIN_CONSECUTIVE_RE = re.compile(r"[.\-]{2}")

_LOCAL_CHARSET_RE = re.compile(r"[A-Za-z0-9_.!#$%&\-]*")
_LOCAL_CONSECUTIVE_RE = re.compile(r"[_.!#$%&\-]{2}")

_PASSWORD_ALLOWED_RE = re.compile(r"[A-Za-z0-9!@#$%^&*+=?]*")
_UPPER_RE = re.compile(r"[A-Z]")
_LOWER_RE = re.compile(r"[a-z]")
_DIGIT_RE = re.compile(r"[0-9]")
_PASSWORD_SYMBOL_RE = re.compile(r"[!@#$%^&*+=?]")


def _result(problems: List[R.Rule]) -> ValidationResult:
    return ValidationResult(problems=tuple(p.message for p in problems))


def validate_username(username: Any) -> ValidationResult:
    if not isinstance(username, str):
        return _result([R.USERNAME_TYPE])

    problems: List[R.Rule] = []
    if not (R.USERNAME_MIN_LEN <= len(username) <= R.USERNAME_MAX_LEN):
        problems.append(R.USERNAME_LENGTH)
    if not _USERNAME_CHARSET_RE.fullmatch(username):
        problems.append(R.USERNAME_CHARSET)
    if username.startswith("_"):
        problems.append(R.USERNAME_LEADING_UNDERSCORE)
    return _result(problems)


def _domain_problems(domain: str) -> List[R.Rule]:
    problems: List[R.Rule] = []
    if len(domain) > R.EMAIL_DOMAIN_MAX_LEN:
        problems.append(R.EMAIL_DOMAIN_LENGTH)
    if not _DOMAIN_CHARSET_RE.fullmatch(domain):
        problems.append(R.EMAIL_DOMAIN_CHARSET)
    labels = [label for label in domain.split(".") if label]
    if len(labels) < R.EMAIL_MIN_DOMAIN_LEVELS:
        problems.append(R.EMAIL_DOMAIN_LEVELS)
    if _DOMAIN_CONSECUTIVE_RE.search(domain):
        problems.append(R.EMAIL_DOMAIN_CONSECUTIVE)
    if domain[0] in R.EMAIL_DOMAIN_SYMBOLS or domain[-1] in R.EMAIL_DOMAIN_SYMBOLS:
        problems.append(R.EMAIL_DOMAIN_EDGE)
    return problems


def _local_problems(local: str) -> List[R.Rule]:
    problems: List[R.Rule] = []
    if len(local) > R.EMAIL_LOCAL_MAX_LEN:
        problems.append(R.EMAIL_LOCAL_LENGTH)
    if not _LOCAL_CHARSET_RE.fullmatch(local):
        problems.append(R.EMAIL_LOCAL_CHARSET)
    if local[0] in R.EMAIL_LOCAL_SYMBOLS or local[-1] in R.EMAIL_LOCAL_SYMBOLS:
        problems.append(R.EMAIL_LOCAL_EDGE)
    if _LOCAL_CONSECUTIVE_RE.search(local):
        problems.append(R.EMAIL_LOCAL_CONSECUTIVE)
    return problems


def validate_email(email: Any) -> ValidationResult:
    """Validate `prefix@domain`.

    The whole string is checked against each rule. With anything other than exactly one
    '@' the parts can't be told apart, so only the format rule is reported.
    """
    if not isinstance(email, str):
        return _result([R.EMAIL_TYPE])
    if email.count("@") != 1:
        return _result([R.EMAIL_FORMAT])

    local, domain = email.split("@")
    problems: List[R.Rule] = []
    if not local or not domain:
        problems.append(R.EMAIL_FORMAT)
    # Domain rules are listed before prefix rules, matching FIELD_RULES order.
    if domain:
        problems.extend(_domain_problems(domain))
    if local:
        problems.extend(_local_problems(local))
    return _result(problems)


def validate_password(password: Any) -> ValidationResult:
    if not isinstance(password, str):
        return _result([R.PASSWORD_TYPE])

    problems: List[R.Rule] = []
    if not (R.PASSWORD_MIN_LEN <= len(password) <= R.PASSWORD_MAX_LEN):
        problems.append(R.PASSWORD_LENGTH)
    if not _UPPER_RE.search(password):
        problems.append(R.PASSWORD_UPPERCASE)
    if not _LOWER_RE.search(password):
        problems.append(R.PASSWORD_LOWERCASE)
    if not _DIGIT_RE.search(password):
        problems.append(R.PASSWORD_DIGIT)
    if not _PASSWORD_SYMBOL_RE.search(password):
        problems.append(R.PASSWORD_SYMBOL)
    if not _PASSWORD_ALLOWED_RE.fullmatch(password):
        problems.append(R.PASSWORD_FORBIDDEN)
    return _result(problems)


def validate_all(username: Any, email: Any, password: Any) -> CompositeValidation:
    """Run all three validators (no short-circuit) and collect per-field problems."""
    results = {
        "username": validate_username(username),
        "email": validate_email(email),
        "password": validate_password(password),
    }
    return CompositeValidation(
        problems={name: res.problems for name, res in results.items() if not res.success}
    )


def validate_profile(
    first_name: Any = None,
    last_name: Any = None,
    job_title: Any = None,
) -> CompositeValidation:
    """Profile fields are optional free text; only a non-string value is a problem."""
    checks = (
        ("first_name", first_name, R.FIRST_NAME_TYPE),
        ("last_name", last_name, R.LAST_NAME_TYPE),
        ("job_title", job_title, R.JOB_TITLE_TYPE),
    )
    return CompositeValidation(
        problems={
            name: (rule.message,)
            for name, value, rule in checks
            if value is not None and not isinstance(value, str)
        }
    )
