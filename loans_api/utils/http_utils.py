"""HTTP helpers for building requests and reading responses"""

import re
from typing import Any, Dict, Mapping, Optional


def join_url(base_url: str, endpoint: str) -> str:
    """Join base URL and endpoint with a single separator, without normalizing either side"""
    return f"{base_url}/{endpoint}"


def compact(values: Mapping[str, Any]) -> Dict[str, Any]:
    """Drop entries whose value is None"""
    return {key: value for key, value in values.items() if value is not None}


def mime_type(content_type: Optional[str]) -> str:
    """Media type of a Content-Type header value, without parameters such as charset"""
    if not content_type:
        return ""
    return content_type.split(";", 1)[0].strip().lower()


_LOAN_REQUEST_TOKEN = re.compile(r"(loan_requests)/[^/?]+")


def mask_endpoint(endpoint: str) -> str:
    """Endpoint safe for logs: loan request tokens replaced with a placeholder"""
    return _LOAN_REQUEST_TOKEN.sub(r"\1/:token", endpoint)
