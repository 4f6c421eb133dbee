"""Shared helpers for roadwork: errors and string utilities."""
