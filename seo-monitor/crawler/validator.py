"""
Content validation gate for fetched bodies.
Keeps anti-bot interstitials, block pages and truncated responses out of the
diff pipeline. Pure function, no I/O.
"""

import re

from crawler.models import ValidationResult
from crawler.url_utils import is_robots_txt

MIN_CONTENT_LENGTH = 1000

# Only the head of the document is scanned; footers routinely mention "error"
ERROR_SCAN_WINDOW = 5000
ERROR_INDICATORS = ("error", "blocked", "captcha", "access denied")

_HTML_TAG = re.compile(r"<html[^>]*>", re.IGNORECASE)
_HEAD_TAG = re.compile(r"<head[^>]*>", re.IGNORECASE)
_BODY_TAG = re.compile(r"<body[^>]*>", re.IGNORECASE)
_ERROR_REGEX = re.compile("|".join(re.escape(i) for i in ERROR_INDICATORS), re.IGNORECASE)


def validate(body: str, url: str) -> ValidationResult:
    """
    Ordered, short-circuiting checks:
    empty -> too short -> robots.txt bypass -> html/head/body present -> error scan.
    """
    if not body or not body.strip():
        return ValidationResult(False, "Empty content")

    if len(body) < MIN_CONTENT_LENGTH:
        return ValidationResult(False, f"Content too short (less than {MIN_CONTENT_LENGTH} characters)")

    # robots.txt is plain text, structure checks do not apply
    if is_robots_txt(url):
        return ValidationResult(True)

    if not (_HTML_TAG.search(body) and _HEAD_TAG.search(body) and _BODY_TAG.search(body)):
        return ValidationResult(False, "Missing basic HTML structure (html/head/body tags)")

    if _ERROR_REGEX.search(body[:ERROR_SCAN_WINDOW]):
        return ValidationResult(False, "Page contains error indicators")

    return ValidationResult(True)
