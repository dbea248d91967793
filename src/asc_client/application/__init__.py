"""Application-level helpers built on the request executor."""
