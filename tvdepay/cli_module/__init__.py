"""Command line interface for the tvdepay application."""
