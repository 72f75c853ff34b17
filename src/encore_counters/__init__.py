"""Encore booking counter engine."""
