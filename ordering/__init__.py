"""Restaurant online ordering service."""
