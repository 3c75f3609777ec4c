"""Sizyx image upload gateway."""
