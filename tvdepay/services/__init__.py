"""Services for the tvdepay application."""
