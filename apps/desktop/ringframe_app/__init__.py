"""Ringframe desktop app and command line."""
