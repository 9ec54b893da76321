"""Result models for service operations."""

from gateway.models.results.gemini import ServiceResult, GenerationResult

__all__ = ["ServiceResult", "GenerationResult"]
