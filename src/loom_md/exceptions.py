"""
Exceptions for loom-md.

The rendering core never raises these; they belong to the workspace,
theme and search layers around it.
"""

from typing import Optional, Dict, Any


class LoomError(Exception):
    """Base exception for loom-md."""
    
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class ConfigError(LoomError):
    """The .loom workspace or its config.json is missing or unreadable."""
    pass


class ThemeNotFoundError(ConfigError):
    """No built-in or custom theme with the requested name."""
    
    def __init__(self, theme_name: str, details: Optional[Dict[str, Any]] = None):
        self.theme_name = theme_name
        super().__init__(f"Theme '{theme_name}' not found", details)


class SearchError(LoomError):
    """Search could not be carried out."""
    pass


class SearchPatternError(SearchError):
    """The search query is not a valid regular expression."""
    
    def __init__(self, pattern: str, reason: str):
        self.pattern = pattern
        super().__init__(
            f"Invalid search pattern '{pattern}': {reason}",
            details={"pattern": pattern, "reason": reason},
        )
