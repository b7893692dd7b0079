import re

import bleach

ALLOWED_TAGS = ["br", "p", "strong", "em", "ul", "ol", "li"]

_html_cleaner = bleach.Cleaner(
    tags=ALLOWED_TAGS,
    attributes={},
    strip=True,
    strip_comments=True,
)

_LINE_BREAKS = re.compile(r"[\r\n]")


def sanitize_html(html: str) -> str:
    return _html_cleaner.clean(html)


def sanitize_email(email: str) -> str:
    # Header injection guard
    return _LINE_BREAKS.sub("", email)


def sanitize_subject(subject: str) -> str:
    return _LINE_BREAKS.sub("", subject)


def sanitize_text(text: str) -> str:
    return (
        text.replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
        .replace("'", "&#39;")
    )


def sanitize_input(value: str) -> str:
    return re.sub(r"[<>]", "", value.strip())
