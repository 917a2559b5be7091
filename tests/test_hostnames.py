"""
Tests for hostname normalization.
"""
import pytest

from core.domain.hostnames import normalize_domain


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("dns.google", "dns.google"),
        ("  Sub.Example.ORG  ", "sub.example.org"),
        ("https://WWW.Example.com/path?q=1", "example.com"),
        ("http://www.a.b.c/", "a.b.c"),
        ("example.com:8443", "example.com"),
        ("exa mple.com", "example.com"),
        (".example.com.", "example.com"),
        ("xn--bcher-kva.example", "xn--bcher-kva.example"),
        ("localhost", ""),
        ("", ""),
        ("https://", ""),
        ("...", ""),
    ],
)
def test_normalize_domain(raw, expected):
    assert normalize_domain(raw) == expected
