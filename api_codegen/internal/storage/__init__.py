from .filesystem import FileSystem
from .materialize import write_files
from .source import read_source

__all__ = ["FileSystem", "read_source", "write_files"]
