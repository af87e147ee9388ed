"""Parsers for e-mail header fields, with Mbox and Maildir readers."""

__version__ = "0.1.0"