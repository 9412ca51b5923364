"""Unit tests for the translation core.

Backends are replaced by registered stub engines or by faked HTTP/SDK calls via
monkeypatch; time-dependent components receive a fake clock.
"""
