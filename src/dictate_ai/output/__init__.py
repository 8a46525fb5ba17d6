"""Output module for the dictate-ai CLI.

Provides consistent formatting, tables, and display helpers.
"""

from dictate_ai.output.console import (
    console,
    format_stars,
    format_tokens,
    print_error,
    print_info,
    print_success,
    print_warning,
)
from dictate_ai.output.tables import (
    create_all_models_table,
    create_catalog_table,
    create_curated_models_table,
    create_providers_table,
)

__all__ = [
    "console",
    "create_all_models_table",
    "create_catalog_table",
    "create_curated_models_table",
    "create_providers_table",
    "format_stars",
    "format_tokens",
    "print_error",
    "print_info",
    "print_success",
    "print_warning",
]
