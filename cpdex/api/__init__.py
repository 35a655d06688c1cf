"""HTTP API for the pool program."""
