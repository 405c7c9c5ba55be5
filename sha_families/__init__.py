"""Bundled constant tables for the supported hash families."""
