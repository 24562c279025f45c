import re


def sanitize_search_term(term: str) -> str:
    """Escape LIKE wildcards and cap length; pair with ``escape='\\\\'``."""
    if not isinstance(term, str):
        return ""
    sanitized = re.sub(r"[%_\\]", r"\\\g<0>", term.strip())
    return sanitized[:100]
