"""Services layer for the TL combat log analyzer.

Contains business logic services that are independent of any UI.
Services can be tested in isolation and driven from a worker thread.
"""

from .summary_parser import LogSummaryParserService
from .scope_service import ScopeService

__all__ = ['LogSummaryParserService', 'ScopeService']
