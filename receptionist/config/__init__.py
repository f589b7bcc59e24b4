"""
Configuration module for the voice receptionist.

This module provides centralized configuration management for the entire application,
including constants, logging setup, and the demo business catalog.

Key components:
- constants: Application-wide constants such as provider URLs, realtime event
  names, tool names, scheduling parameters and timeouts.
- logging_config: Console and rotating-file logging for the application logger.
- businesses: Demo business catalog keyed by persona, and voice selection.

Usage examples:
```python
from receptionist.config.constants import LOGGER_NAME, DEFAULT_REALTIME_MODEL
from receptionist.config.logging_config import configure_logging

logger = configure_logging()
logger.info("Application started")
```
"""

# Config module initialization
