"""Standard library: adapters, engine libs and the built-in command set."""
