"""Configuration models, runtime settings, and the logging bootstrap."""
