"""Kernel: domain models, ports, configuration and the command dispatcher."""
