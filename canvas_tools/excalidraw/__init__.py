"""Excalidraw CLI - Tools for driving an Excalidraw Canvas Server over HTTP.

This module provides:
- api: REST client for the canvas server's element endpoints
- payload: JSON payload loading for create/update/import
"""

__version__ = "0.1.0"
