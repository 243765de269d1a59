"""Drivers: concrete implementations of kernel ports that own in-process state."""
