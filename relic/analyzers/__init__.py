"""
Relic Analyzers
================

Post-decode passes over the content graph: nested class reconnection
and normalization to plain values.
"""

from relic.analyzers.member_classes import MemberClassConnector, connect_member_classes
from relic.analyzers.normalizer import Normalizer, ObjectNormalizer, normalize

__all__ = [
    "MemberClassConnector",
    "Normalizer",
    "ObjectNormalizer",
    "connect_member_classes",
    "normalize",
]
