"""
HTML Escaping for operator alerts

Alerts are sent in Telegram HTML mode. Customer-controlled values
(names, addresses, error texts coming back from storage) must be escaped
before they are embedded.
"""

import html
from typing import Optional


def safe_html(text: Optional[str]) -> str:
    """
    Escapes HTML special characters.

    Examples:
        >>> safe_html("Order</b><script>")
        "Order&lt;/b&gt;&lt;script&gt;"

        >>> safe_html(None)
        ""
    """
    if text is None:
        return ""
    return html.escape(str(text), quote=True)
