"""Services for PageSift."""
from .page_renderer import PageRenderer, RendererConfig
from .document_loader import DocumentLoader, LoadedDocument
from .page_extractor import PageExtractor, export_filename
from .llm_client import LLMClient, LLMResponse, LLMError, LLMClientError
from .query_matcher import QueryMatcher, QueryMatcherConfig, MatchResult, decode_indices
from .session_manager import SessionManager

__all__ = ['PageRenderer', 'RendererConfig', 'DocumentLoader', 'LoadedDocument', 'PageExtractor', 'export_filename', 'LLMClient', 'LLMResponse', 'LLMError', 'LLMClientError', 'QueryMatcher', 'QueryMatcherConfig', 'MatchResult', 'decode_indices', 'SessionManager']
