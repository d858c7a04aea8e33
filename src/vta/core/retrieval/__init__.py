"""Retrieval of course material from the hosted vector index."""

from .deps import build_vector_index, get_course_index, get_pinecone_client
from .index import CourseMaterialIndex, Metadata, VectorIndexUnavailable

__all__ = [
    "build_vector_index",
    "CourseMaterialIndex",
    "get_course_index",
    "get_pinecone_client",
    "Metadata",
    "VectorIndexUnavailable",
]
