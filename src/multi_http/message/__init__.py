"""
Message layer - turns transfer output into responses.
"""

from multi_http.message.builder import ResponseBuilder

__all__ = ["ResponseBuilder"]
