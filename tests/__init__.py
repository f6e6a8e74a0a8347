"""Unit tests for the chat translator.

Tests use pytest with asyncio support and replace HTTP/provider calls with fakes via monkeypatch.
"""
