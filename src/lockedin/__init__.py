"""Locked In: group accountability for distracting websites."""
