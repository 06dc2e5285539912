"""
Common utility functions for jsoninfer.
"""

from typing import List, Union

from jsonpointer import JsonPointer


def pointer_of(parts: List[Union[str, int]]) -> str:
    """
    Build a JSON Pointer from a list of path segments.

    Args:
        parts (List[Union[str, int]]): Property names and indices, outermost first.

    Returns:
        str: The escaped pointer, '' for the document root.
    """
    return JsonPointer.from_parts([str(p) for p in parts]).path
