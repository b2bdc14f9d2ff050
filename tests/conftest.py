"""Shared fixtures: sample Exchange bounce messages."""

import email

import pytest

from samples import BOUNCE_EML, EXCHANGE_HEADERS, PLAIN_EML


@pytest.fixture
def exchange_headers():
    return {key: (list(value) if isinstance(value, list) else value) for key, value in EXCHANGE_HEADERS.items()}


@pytest.fixture
def bounce_message():
    return email.message_from_string(BOUNCE_EML)


@pytest.fixture
def bounce_file(tmp_path):
    path = tmp_path / "bounce.eml"
    path.write_bytes(BOUNCE_EML.encode("utf-8"))
    return path


@pytest.fixture
def plain_file(tmp_path):
    path = tmp_path / "plain.eml"
    path.write_bytes(PLAIN_EML.encode("utf-8"))
    return path
