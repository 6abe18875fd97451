"""linenotes: line-anchored code annotations stored and shared through git."""

from linenotes.core import Annotator
from linenotes.models import Annotation, AnnotationData
from linenotes.storage.store import AnnotationStore, LoadResult
from linenotes.vcs.git import GitRepository

__all__ = [
    "Annotation",
    "AnnotationData",
    "AnnotationStore",
    "Annotator",
    "GitRepository",
    "LoadResult",
]
