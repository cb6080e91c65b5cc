"""
Validation and local execution of the DDN supergraph pipeline.

This package checks a DDN project's configuration, runs the introspection
and build sequence locally, and generates the hosted pipeline definition.
"""

from .models import PipelineSettings, ValidationReport
from .settings import load_env_file, load_settings

__all__ = ["PipelineSettings", "ValidationReport", "load_env_file", "load_settings"]
