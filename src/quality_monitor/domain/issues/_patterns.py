# issues/_patterns.py

import re

EMAIL = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

PHONE = re.compile(
    r"^[\+]?[1-9][\d]{0,15}$|^\(\d{3}\)\s\d{3}-\d{4}$|^\d{3}-\d{3}-\d{4}$",
)

# Characters kept before matching a phone number; everything else is dropped
PHONE_NOISE = re.compile(r"[^\d\+\(\)\-\s]")

POSTAL_CODE = re.compile(r"^\d{5}(-\d{4})?$")

STATE_CODE = re.compile(r"^[A-Z]{2}$")

URL = re.compile(
    r"^https?://(www\.)?[-a-zA-Z0-9@:%._\+~#=]{1,256}\.[a-zA-Z0-9()]{1,6}\b"
    r"([-a-zA-Z0-9()@:%_\+.~#?&/=]*)$",
)

REPEATED_WHITESPACE = re.compile(r"\s{2,}")

# ISBN-10 or ISBN-13, optionally prefixed and separated by hyphens or spaces
ISBN = re.compile(
    r"^(?:ISBN(?:-1[03])?:? )?"
    r"(?=[0-9X]{10}$|(?=(?:[0-9]+[- ]){3})[- 0-9X]{13}$|97[89][0-9]{10}$"
    r"|(?=(?:[0-9]+[- ]){4})[- 0-9]{17}$)"
    r"(?:97[89][- ]?)?[0-9]{1,5}[- ]?[0-9]+[- ]?[0-9]+[- ]?[0-9X]$",
)
