"""Kernel – errors, time and identifier primitives shared by every layer."""
