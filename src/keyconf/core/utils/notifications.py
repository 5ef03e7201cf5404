"""
User notification utilities for keyconf.

The configuration store only collects validation errors; this module is
the host-side piece that shows them to the user.
"""

from typing import Iterable, Optional

from rich.console import Console
from rich.panel import Panel
from rich.text import Text

from keyconf.core.config.validation import ValidationError, format_config_errors

console = Console()


def notify_config_errors(
    errors: Optional[Iterable[ValidationError]],
    output: Optional[Console] = None,
) -> Optional[str]:
    """
    Show stored configuration errors in a panel.

    Args:
        errors: Errors from ``ConfigStore.get_stored_config_errors()``
        output: Console to print to (defaults to the module console)

    Returns:
        The rendered error text, or None when there is nothing to report
    """
    text = format_config_errors(errors)
    if not text:
        return None
    (output or console).print(
        Panel(
            Text(text),
            title="Configuration errors",
            subtitle="Default values are used for these settings",
            border_style="red",
        )
    )
    return text
