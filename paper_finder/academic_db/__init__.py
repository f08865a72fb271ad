"""Providers for open academic databases queried over plain HTTP."""

from .bielefeld import BASEProvider
from .core import COREProvider
from .doaj import DOAJProvider
from .pubmed import PubMedProvider, parse_pubmed_xml

__all__ = [
    "BASEProvider",
    "COREProvider",
    "DOAJProvider",
    "PubMedProvider",
    "parse_pubmed_xml",
]
