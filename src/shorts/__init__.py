"""Shorts Creator - AI-powered short video producer."""

__version__ = "0.1.0"
