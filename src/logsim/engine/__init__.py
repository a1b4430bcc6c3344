"""Concurrent simulation engine: simulated users and their coordinator."""
