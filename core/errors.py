"""
Errors
Exception types raised by the hat pack codec and editor session
"""


class HatPackError(Exception):
    """Base class for hat pack errors"""


class BundleIOError(HatPackError):
    """A bundle directory or element file could not be read or written"""


class InvalidBundleError(HatPackError):
    """An operation would break the bundle's composition rules"""
