"""Adapters – provider-specific platform senders."""
