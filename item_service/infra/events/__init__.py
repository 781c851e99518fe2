"""Event delivery infrastructure."""
