"""Unit tests for the shared repository helpers."""

import pytest
from sqlalchemy.dialects import sqlite

from modules.backend.models.customer import Customer
from modules.backend.repositories.base import contains, escape_like


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("office", "office"),
        ("100%", "100\\%"),
        ("john_doe", "john\\_doe"),
        ("C:\\racks", "C:\\\\racks"),
    ],
)
def test_escape_like(text, expected):
    assert escape_like(text) == expected


def test_contains_binds_escaped_pattern():
    clause = contains(Customer.name, "50%_off")

    compiled = clause.compile(dialect=sqlite.dialect())

    assert "ESCAPE" in str(compiled)
    assert list(compiled.params.values())[0] == "%50\\%\\_off%"
