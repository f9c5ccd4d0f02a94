"""Helpers for invoking git and recording failures."""
