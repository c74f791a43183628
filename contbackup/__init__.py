"""Resumable blob copy sessions: blobs, storage readers and writers, session state and argument parsing."""

__version__ = "0.1.0"