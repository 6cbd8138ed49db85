"""Query matcher: maps a free-text query to page indices via an LLM."""
import json
import logging
import re
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence, Union
import tiktoken

from config import SEARCH_MODEL, EXCERPT_CHARS, SEARCH_MAX_TOKENS, MAX_PROMPT_TOKENS
from models.document import Page
from services.llm_client import LLMClient, LLMClientError

logger = logging.getLogger(__name__)

_CODE_FENCE = re.compile(r"^```[a-zA-Z]*\s*(.*?)\s*```$", re.DOTALL)


@dataclass
class QueryMatcherConfig:
    """Settings for page search requests."""
    model: str = "llama-3.1-8b-instant"
    excerpt_chars: int = 500
    max_tokens: int = 256
    max_prompt_tokens: int = 100000

    @classmethod
    def from_env(cls) -> "QueryMatcherConfig":
        return cls(
            model=SEARCH_MODEL,
            excerpt_chars=EXCERPT_CHARS,
            max_tokens=SEARCH_MAX_TOKENS,
            max_prompt_tokens=MAX_PROMPT_TOKENS,
        )


@dataclass
class DecodeSuccess:
    indices: List[int]


@dataclass
class DecodeFailure:
    reason: str


DecodeResult = Union[DecodeSuccess, DecodeFailure]


@dataclass
class MatchResult:
    """Outcome of a page search. A failed search carries an error code and no indices."""
    indices: List[int] = field(default_factory=list)
    error_code: Optional[str] = None
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.error_code is None


def decode_indices(text: Optional[str]) -> DecodeResult:
    """
    Decode a model response into a list of page indices.

    Non-integer elements are dropped and integers keep their original order.
    Anything that is not a JSON array is a DecodeFailure.
    """
    if not text or not text.strip():
        return DecodeFailure("empty response")

    body = text.strip()
    fenced = _CODE_FENCE.match(body)
    if fenced:
        body = fenced.group(1)

    try:
        parsed = json.loads(body)
    except ValueError as e:
        return DecodeFailure(f"invalid JSON: {e}")

    if not isinstance(parsed, list):
        return DecodeFailure(f"expected JSON array, got {type(parsed).__name__}")

    return DecodeSuccess([
        item for item in parsed
        if isinstance(item, int) and not isinstance(item, bool)
    ])


def _tiktoken_counter() -> Callable[[str], int]:
    encoder = tiktoken.get_encoding("o200k_base")
    return lambda text: len(encoder.encode(text))


class QueryMatcher:
    """Asks a language model which pages best match a query.

    match() never raises: LLM failures, oversized prompts and undecodable
    responses all degrade to an empty result with an error code.
    """

    def __init__(
        self,
        llm_client: LLMClient,
        config: Optional[QueryMatcherConfig] = None,
        token_counter: Optional[Callable[[str], int]] = None
    ):
        """
        Initialize the matcher.

        Args:
            llm_client: Client used for the single generation request
            config: Search settings (defaults to QueryMatcherConfig())
            token_counter: Counts prompt tokens; defaults to tiktoken o200k_base
        """
        self.llm_client = llm_client
        self.config = config or QueryMatcherConfig()
        self._token_counter = token_counter

    def count_tokens(self, text: str) -> int:
        if self._token_counter is None:
            self._token_counter = _tiktoken_counter()
        return self._token_counter(text)

    def build_prompt(self, query: str, pages: Sequence[Page]) -> str:
        """Build the search prompt with a truncated excerpt per page."""
        page_data = [
            {"index": page.index, "content": page.text_content[:self.config.excerpt_chars]}
            for page in pages
        ]
        return f"""Analyze the following PDF page contents and identify the page indices (0-based) that best match the user's search query: "{query}".
Return only a JSON array of integer indices, for example [0, 3, 4]. Return [] if no page matches.

Data: {json.dumps(page_data)}"""

    def match(self, query: str, pages: Sequence[Page]) -> MatchResult:
        """
        Find pages matching a query.

        Args:
            query: Free-text search intent
            pages: Full ordered page list of the document

        Returns:
            MatchResult with in-range, duplicate-free indices in model order
        """
        query = (query or "").strip()
        if not query or not pages:
            return MatchResult()

        prompt = self.build_prompt(query, pages)
        try:
            prompt_tokens = self.count_tokens(prompt)
        except Exception as e:
            logger.error(f"Token counting failed: {e}", exc_info=True)
            return MatchResult(error_code="QUERY_ERROR", message=f"Token counting failed: {e}")

        if prompt_tokens > self.config.max_prompt_tokens:
            logger.warning(
                f"Search prompt too large: tokens={prompt_tokens}, "
                f"limit={self.config.max_prompt_tokens}, pages={len(pages)}"
            )
            return MatchResult(
                error_code="QUERY_TOO_LARGE",
                message=f"Document too large to search ({prompt_tokens} tokens)"
            )

        logger.info(f"Searching {len(pages)} pages: query={query[:100]!r}, prompt_tokens={prompt_tokens}")

        try:
            response = self.llm_client.generate(
                model=self.config.model,
                prompt=prompt,
                max_tokens=self.config.max_tokens
            )
        except LLMClientError as e:
            logger.warning(f"Search failed: {e.error.code} {e.error.message}")
            return MatchResult(error_code="QUERY_ERROR", message=e.error.message)
        except Exception as e:
            logger.error(f"Unexpected search failure: {e}", exc_info=True)
            return MatchResult(error_code="QUERY_ERROR", message=str(e))

        decoded = decode_indices(response.text)
        if isinstance(decoded, DecodeFailure):
            logger.warning(f"Could not decode search response: {decoded.reason}")
            return MatchResult(error_code="DECODE_ERROR", message=decoded.reason)

        indices = self._in_bounds(decoded.indices, len(pages))
        logger.info(f"Search matched {len(indices)} pages: {indices}")
        return MatchResult(indices=indices)

    def suggest_pages(self, query: str, pages: Sequence[Page]) -> List[int]:
        return self.match(query, pages).indices

    @staticmethod
    def _in_bounds(indices: List[int], total: int) -> List[int]:
        kept = []
        for index in indices:
            if index < 0 or index >= total:
                logger.warning(f"Dropping out-of-range suggested index {index} (pages={total})")
            elif index not in kept:
                kept.append(index)
        return kept
