from __future__ import annotations

import pytest

from csvexport.domain.rules import Rules


@pytest.fixture
def people_rules() -> Rules:
    """Country constant plus an Active/Inactive status formatter."""
    return Rules.build(
        static_by_header={"Country": "USA"},
        format_by_header={"Status": lambda value, _row: "Active" if value else "Inactive"},
    )
