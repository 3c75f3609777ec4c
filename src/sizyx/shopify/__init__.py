"""Shopify Admin API integration: customers, staged uploads, metadata."""
