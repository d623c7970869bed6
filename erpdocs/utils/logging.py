"""
Logging utilities for the ERP documents backend.

Provides standardized logger configuration following the privacy rules for
commercial documents.

RULES:
- NEVER log bank account numbers, UPI handles or IFSC codes
- NEVER log party phone numbers, emails or street addresses
- NEVER log rendered markup (it contains all of the above)
- NEVER log Supabase Auth tokens, API keys, or secrets

Acceptable logging:
- High-level events (e.g., "Document committed", "Markup uploaded")
- Non-sensitive metadata (e.g., kind='quotation', items=4, regime='split')
- Grand totals together with the document id
- Error codes and sanitized error messages
"""

import logging
from typing import Optional


def get_logger(name: str, level: Optional[int] = None) -> logging.Logger:
    """
    Get a configured logger for the specified module.

    Args:
        name: Module name (typically __name__)
        level: Optional logging level (defaults to INFO)

    Returns:
        Configured logger instance

    Usage:
        >>> from erpdocs.utils.logging import get_logger
        >>> logger = get_logger(__name__)
        >>> logger.info("Document committed")
    """
    logger = logging.getLogger(name)

    if level is None:
        level = logging.INFO

    logger.setLevel(level)

    # Add handler if not already configured (avoid duplicate handlers)
    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter(
            fmt='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    return logger
