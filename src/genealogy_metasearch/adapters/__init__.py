"""Adapters exposing metasearch to external callers."""
