"""
Keyword tables shared by the tokenizer, the segmenter, the field filter and
the assembler. Everything that decides "is this word SQL" reads from here.
"""

# Single words recognized as keywords by the tokenizer (uppercase comparison)
KEYWORDS = {
    "SELECT", "DISTINCT", "FROM", "WHERE", "GROUP", "BY", "HAVING",
    "ORDER", "LIMIT", "OFFSET", "UNION", "ALL", "INTERSECT", "EXCEPT",
    "MINUS", "WITH", "INSERT", "UPDATE", "DELETE", "CREATE", "ALTER", "DROP",
    "JOIN", "LEFT", "RIGHT", "INNER", "OUTER", "FULL", "CROSS", "ON", "USING",
    "AS", "CASE", "WHEN", "THEN", "ELSE", "END", "AND", "OR", "NOT",
    "IN", "EXISTS", "BETWEEN", "FILTER",
}


# Keywords that open a clause on their own
SINGLE_CLAUSE_KEYWORDS = [
    "SELECT",
    "FROM",
    "WHERE",
    "HAVING",
    "LIMIT",
    "OFFSET",
    "WITH",
    "FILTER",
]

# First word -> required second word
COMPOUND_CLAUSE_KEYWORDS = {
    "GROUP": "BY",
    "ORDER": "BY",
    "UNION": "ALL",
    "MINUS": "ALL",
}

# Set operators that are a clause by themselves when not followed by ALL
BARE_SET_OPERATORS = ["UNION", "MINUS"]

SET_OPERATORS = ["UNION", "UNION ALL", "MINUS", "MINUS ALL"]


# Clauses whose content is a comma separated field list
FIELD_CONTAINER_CLAUSES = ["SELECT", "GROUP BY", "ORDER BY"]

# Leading modifiers of a SELECT list that belong with the keyword
SELECT_MODIFIERS = ["DISTINCT", "ALL"]


# Canonical order of a single query block
CLAUSE_ORDER = ["SELECT", "FROM", "WHERE", "GROUP BY", "HAVING", "ORDER BY", "LIMIT"]


# List of major clauses to add a blank line before
MAJOR_CLAUSES = [
    "SELECT", "FROM", "WHERE", "GROUP BY", "HAVING", "ORDER BY",
    "UNION", "UNION ALL", "MINUS", "MINUS ALL",
    "WITH", "FILTER",
]

# Always rendered on the keyword line
SIMPLE_CLAUSES = ["FROM", "LIMIT", "OFFSET"]

# Rendered on the keyword line while short and flat
CONDITION_CLAUSES = ["WHERE", "HAVING", "FILTER"]


# A field starting with one of these is a stray keyword fragment, not a field
NON_FIELD_KEYWORDS = [
    "FROM", "WHERE", "GROUP BY", "HAVING", "ORDER BY", "LIMIT",
    "OFFSET", "UNION", "UNION ALL", "MINUS", "MINUS ALL", "INTERSECT",
    "EXCEPT", "WITH", "JOIN", "LEFT JOIN", "RIGHT JOIN", "INNER JOIN",
    "OUTER JOIN", "FULL JOIN", "CROSS JOIN", "ON", "USING", "AND",
    "OR", "NOT", "IN", "EXISTS", "BETWEEN", "LIKE", "IS", "NULL",
    "TRUE", "FALSE", "DISTINCT", "ALL", "FILTER",
]


# Function names accepted as field calls when resources/functions.json is missing
DEFAULT_FUNCTIONS = {
    "aggregate": ["SUM", "COUNT", "AVG", "MIN", "MAX", "STDDEV", "VARIANCE"],
    "date": ["TO_DATE", "TO_CHAR", "EXTRACT", "DATE_TRUNC", "ADD_MONTHS", "MONTHS_BETWEEN"],
    "string": [
        "SUBSTR", "SUBSTRING", "CONCAT", "TRIM", "LTRIM", "RTRIM",
        "UPPER", "LOWER", "INITCAP", "LENGTH", "INSTR",
    ],
    "window": ["ROW_NUMBER", "RANK", "DENSE_RANK", "LAG", "LEAD", "FIRST_VALUE", "LAST_VALUE"],
}


def is_field_container(clause_kind: str) -> bool:
    return clause_kind in FIELD_CONTAINER_CLAUSES
