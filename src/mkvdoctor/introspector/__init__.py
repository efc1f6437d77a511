"""Introspector module for MKV Doctor.

This module provides media introspection capabilities:

- MediaIntrospector: Protocol defining the introspection interface
- ExternalToolIntrospector: Production implementation using ffprobe, ffmpeg,
  mkvinfo and mkvmerge
- StubIntrospector: Stub implementation for testing
- MediaIntrospectionError: Exception for introspection failures
"""

from mkvdoctor.introspector.adapter import ExternalToolIntrospector
from mkvdoctor.introspector.interface import (
    MediaIntrospectionError,
    MediaIntrospector,
)
from mkvdoctor.introspector.stub import StubIntrospector

__all__ = [
    "MediaIntrospector",
    "MediaIntrospectionError",
    "ExternalToolIntrospector",
    "StubIntrospector",
]
