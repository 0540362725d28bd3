"""
File Operations Module - Data sources, sinks and directory archiving.
"""

from hycrypt.core.file_ops.archive import (
    create_temp_zip,
    finalize_directory,
    unzip_file,
    zip_directory,
)
from hycrypt.core.file_ops.sink import (
    DataSink,
    FileSink,
    HexSink,
    TextSink,
    create_sink,
)
from hycrypt.core.file_ops.source import (
    DataSource,
    DirectorySource,
    FileSource,
    HexSource,
    TextSource,
    create_source,
)

__all__ = [
    "DataSink",
    "DataSource",
    "DirectorySource",
    "FileSink",
    "FileSource",
    "HexSink",
    "HexSource",
    "TextSink",
    "TextSource",
    "create_sink",
    "create_source",
    "create_temp_zip",
    "finalize_directory",
    "unzip_file",
    "zip_directory",
]
