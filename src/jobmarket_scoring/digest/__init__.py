"""Digest layer — saved searches turned into ranked, persisted job lists."""

from jobmarket_scoring.digest.generator import Digest, DigestGenerator, DigestRow, extract_keywords
from jobmarket_scoring.digest.schedule import is_due

__all__ = ["Digest", "DigestGenerator", "DigestRow", "extract_keywords", "is_due"]
