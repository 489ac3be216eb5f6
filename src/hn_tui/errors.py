from __future__ import annotations


class HNError(Exception):
    """Base class for every error this application reports to the user."""


class FetchError(HNError):
    """A network request failed or returned a non-success status."""


class NoContentError(HNError):
    """An article was fetched but no readable text could be extracted."""


class StoreError(HNError):
    """The read-state store could not be used."""


class CorruptStoreError(StoreError):
    """The store file exists but does not have the expected shape."""


class PersistError(StoreError):
    """Reading or writing the store file failed."""


class BrowserLaunchError(HNError):
    """The system browser could not be opened."""
