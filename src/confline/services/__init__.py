"""Service layer: type resolution, decoding, validation, and the pipeline.

Services may import from domain, config, and infrastructure layers.
They must never import from commands or output.
"""
