"""Short links to remote files and folders served through pluggable source backends."""

__version__ = '1.0.0'
