"""Utility helpers for backlogiq."""
