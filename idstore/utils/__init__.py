"""Utilities shared by the components of Idstore."""
