"""Snippetbox: create, view and share short text snippets."""

__version__ = '1.0.0'
