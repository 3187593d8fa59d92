"""
Canvas Tools

Command-line helpers for driving an Excalidraw canvas server:
- excalidraw: health, clear, create/update/delete, import/export and query
"""

__version__ = '1.0.0'
