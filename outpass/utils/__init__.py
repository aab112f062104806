from outpass.utils.file_handler import (
    FileHandlerError,
    generate_unique_filename,
    safe_filename,
    save_bytes_to_path,
)

__all__ = [
    "FileHandlerError",
    "generate_unique_filename",
    "safe_filename",
    "save_bytes_to_path",
]
