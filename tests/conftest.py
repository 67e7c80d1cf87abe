"""
Pytest configuration and shared fixtures.
"""
import pytest

from sql_pack_tool.config import FormattingConfig


@pytest.fixture
def config():
    return FormattingConfig()


@pytest.fixture
def narrow_config():
    """Small line budget so packing wraps on short field lists."""
    return FormattingConfig(max_chars_per_line=40)


@pytest.fixture
def sample_query():
    return (
        "SELECT\n"
        "    id,\n"
        "    customer_name,\n"
        "    SUM(amount) AS total\n"
        "FROM orders\n"
        "WHERE status = 'open'\n"
        "GROUP BY\n"
        "    id,\n"
        "    customer_name\n"
        "ORDER BY total DESC"
    )
