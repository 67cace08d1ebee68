"""
StyleAI - An AI-assisted wardrobe and outfit planning service.

This package contains the complete application:
- core: Framework-agnostic wardrobe and styling logic
- infrastructure: External service integrations
- api: FastAPI routes and dependencies
- config: Application configuration
"""

__version__ = "0.1.0"
