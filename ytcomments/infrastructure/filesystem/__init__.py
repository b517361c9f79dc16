"""Durable per-video output."""
