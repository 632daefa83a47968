"""Core configuration, database, key material and security components."""
