"""Delay normalization, validation and payload construction."""
