"""
Core module for the recording session.

This module contains:
- config.py: Application configuration and settings
- config_loader.py: Initial healing policy loading
- logging_config.py: Logging configuration
- models/: Session, test draft, step and healing policy models
"""

__all__ = ["config", "config_loader", "logging_config", "models"]
