"""Trim OpenAPI specifications down to a chosen set of endpoints."""

__version__ = '1.0.0'

from apisnip.closure import Diagnostic, TrimResult, trim
from apisnip.document import Document, Endpoint, EndpointKey, load
from apisnip.ranking import display_list, fuzzy_score
from apisnip.refs import ComponentKey, parse_ref, resolve
from apisnip.session import Session

__all__ = [
    'ComponentKey',
    'Diagnostic',
    'Document',
    'Endpoint',
    'EndpointKey',
    'Session',
    'TrimResult',
    'display_list',
    'fuzzy_score',
    'load',
    'parse_ref',
    'resolve',
    'trim',
]
