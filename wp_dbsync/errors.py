"""
Exceptions raised by the wp_dbsync commands
"""


class SyncError(Exception):
    """Base class for wp_dbsync errors"""


class StorageDeclinedError(SyncError):
    """The user chose not to continue after the disk space warning"""


class ExportError(SyncError):
    """The remote database export could not be produced or downloaded"""


class ImportSQLError(SyncError):
    """The SQL file could not be imported into the local environment"""
