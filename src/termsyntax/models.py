"""Base Pydantic models for termsyntax.

This module provides the base model class that all termsyntax Pydantic models
inherit from. It establishes consistent configuration across all models:

- Strict field validation (no extra fields allowed)
- Immutable instances so options can be shared between threads

Example:
    >>> from termsyntax.models import SyntaxBaseModel
    >>>
    >>> class MyOptions(SyntaxBaseModel):
    ...     path: str = ""
    >>>
    >>> MyOptions(path="server").model_dump()
    {'path': 'server'}
"""

from pydantic import BaseModel, ConfigDict


class SyntaxBaseModel(BaseModel):
    """Base model for all termsyntax Pydantic models.

    - extra="forbid": Rejects any fields not defined in the model
    - frozen=True: Makes instances immutable
    """

    model_config = ConfigDict(extra="forbid", frozen=True)
