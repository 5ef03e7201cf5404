"""
Shared pytest fixtures and configuration for keyconf tests.
"""

import json
import sys
from pathlib import Path

import pytest

# Put `src/` first so `import keyconf` uses workspace code.
_REPO_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(_REPO_ROOT / "src"))

from keyconf.core.config.schema import (  # noqa: E402
    ConfigSchema,
    boolean_field,
    integer_field,
    string_field,
)


# ============================================================================
# Schema Fixtures
# ============================================================================

@pytest.fixture
def schema() -> ConfigSchema:
    """Small schema shaped like a desktop app's settings."""
    return ConfigSchema(
        {
            "fonts.monoFamily": string_field(default="Arial"),
            "usageMetrics.enabled": boolean_field(default=False),
            "terminal.fontSize": integer_field(default=15, min=1, max=256),
        }
    )


@pytest.fixture
def schema_file(tmp_path) -> Path:
    """The same schema as a JSON definitions file."""
    path = tmp_path / "schema.json"
    path.write_text(
        json.dumps(
            {
                "fonts.monoFamily": {"type": "string", "default": "Arial"},
                "usageMetrics.enabled": {"type": "boolean", "default": False},
                "terminal.fontSize": {"type": "integer", "default": 15, "min": 1, "max": 256},
            }
        ),
        encoding="utf-8",
    )
    return path


@pytest.fixture
def store_file(tmp_path) -> Path:
    return tmp_path / "store" / "config.json"
