"""Packaged morph definition samples."""
