"""Infrastructure layer: configuration sources.

This layer depends on stdlib and the domain error types only.
It must never import from services, commands, or output.
Sources return raw byte streams; the service layer decides what they mean.
"""
