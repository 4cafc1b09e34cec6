"""
Exception types for the additive matching core.

Only failures that stop an operation from proceeding at all are raised.
A query without a match is a normal outcome and is returned as ``None``;
malformed catalog rows and unparseable regulation codes are dropped.
"""


class AdditiveLensError(Exception):
    """Base class for all additive_lens errors."""


class LoadError(AdditiveLensError):
    """A reference resource is missing, unreadable or structurally malformed."""


class CatalogLoadError(LoadError):
    """The substance catalog could not be loaded."""


class RegulationLoadError(LoadError):
    """The regulation index could not be loaded."""
