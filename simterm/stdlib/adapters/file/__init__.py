"""Local-disk adapters."""

from simterm.stdlib.adapters.file.json_file_storage import JsonFileStorage

__all__ = ["JsonFileStorage"]
