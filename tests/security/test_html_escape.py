"""
Unit Tests for HTML Escaping Utilities

Tests HTML injection prevention for customer-controlled data in operator alerts.
"""

from utils.html_escape import safe_html


class TestSafeHtml:
    """Test safe_html() function"""

    def test_escape_script_injection(self):
        """Test blocking script tag injection"""
        malicious = "Road</b><script>alert('XSS')</script>"
        result = safe_html(malicious)
        assert "<script>" not in result
        assert "&lt;script&gt;" in result
        assert "</b>" not in result

    def test_escape_quote_injection(self):
        """Test escaping quote injection (attribute breakout)"""
        result = safe_html('Rao" onclick="alert(1)')
        assert '"' not in result
        assert '&quot;' in result

    def test_none_returns_empty_string(self):
        assert safe_html(None) == ""

    def test_non_string_values(self):
        assert safe_html(42) == "42"

    def test_plain_text_unchanged(self):
        assert safe_html("221B Residency Road, Bengaluru") == "221B Residency Road, Bengaluru"
