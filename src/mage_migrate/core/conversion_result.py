"""
Data structures representing the output of the migration pipeline.

This module defines the `ConversionResult` Pydantic model, which encapsulates
the generated code, any errors encountered, and the execution trace logs.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class ConversionResult(BaseModel):
  """
  Container for the results of migrating a single file.
  """

  code: str = Field(default="", description="The generated source code.")
  file_path: Optional[str] = Field(default=None, description="Source file, when known.")
  errors: List[str] = Field(default_factory=list, description="List of error messages encountered.")
  success: bool = Field(
    default=True,
    description="True if the pipeline completed without fatal errors.",
  )
  conversions: List[Dict[str, Any]] = Field(default_factory=list, description="Rewritten legacy calls.")
  unresolved: List[Dict[str, Any]] = Field(default_factory=list, description="Legacy calls left unchanged.")
  injected: List[Dict[str, str]] = Field(default_factory=list, description="Constructor dependencies added.")
  trace_events: List[Dict[str, Any]] = Field(default_factory=list, description="Execution trace log data.")

  @property
  def has_errors(self) -> bool:
    """
    Check if the result contains any error messages.

    Returns:
        True if one or more errors are present.
    """
    return len(self.errors) > 0

  @property
  def changed(self) -> bool:
    return bool(self.conversions)
