"""Sponta challenge lifecycle and streak service."""
