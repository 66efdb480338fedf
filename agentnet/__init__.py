"""Aggregated view of agents registered on-chain."""
