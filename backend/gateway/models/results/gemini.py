"""
Result models for generation service operations.
"""

from pydantic import BaseModel
from typing import Optional


class ServiceResult(BaseModel):
    """Base result for external service operations."""
    success: bool


class GenerationResult(ServiceResult):
    """Result of a single content generation call."""
    response: Optional[str] = None
    error: Optional[str] = None
    model_name: Optional[str] = None
    input_tokens: Optional[int] = None
    output_tokens: Optional[int] = None
    finish_reason: Optional[str] = None
