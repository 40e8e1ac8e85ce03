"""Service layer — engine operations wrapped in ServiceResult.

Services may import from the domain layer.
They must never import from commands or output.
"""
