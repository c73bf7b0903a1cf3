"""
TaskFlow - a personal task and project manager

Tasks and projects live in a local SQLite database and are filtered with a
small query language (see ``taskflow.query``).
"""

__version__ = "0.1.0"
