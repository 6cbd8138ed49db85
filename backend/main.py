"""Main entry point for PageSift API."""
import logging
import time
from typing import List, Optional
from urllib.parse import quote
from fastapi import FastAPI, HTTPException, UploadFile, File, Response
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware

from config import PORT, LOG_LEVEL, LOG_FORMAT, CORS_ORIGINS, GROQ_API_KEY, MAX_UPLOAD_MB
from logger import setup_logging
from models.api import (
    ToggleRequest,
    ReplaceSelectionRequest,
    SearchRequest,
    PagePreview,
    DocumentSummary,
    DocumentResponse,
    SelectionResponse,
    SearchResponse,
    SessionResponse,
)
from models.errors import LoadError, ExtractError, SessionNotFoundError, SessionBusyError
from models.session import Session, SessionStatus
from services.page_renderer import PageRenderer, RendererConfig
from services.document_loader import DocumentLoader
from services.page_extractor import PageExtractor, export_filename
from services.llm_client import LLMClient
from services.query_matcher import QueryMatcher, QueryMatcherConfig
from services.session_manager import SessionManager

# Initialize logging
logger = logging.getLogger(__name__)

LOAD_FAILED_MESSAGE = "Failed to process PDF. Please try another file."
SEARCH_FAILED_MESSAGE = "AI search failed. Please try again."
EXPORT_FAILED_MESSAGE = "Failed to generate PDF."

# Initialize FastAPI app
app = FastAPI(
    title="PageSift",
    description="Preview PDF pages, find them with AI search, and export a selection",
    version="1.0.0"
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["Content-Disposition"],
)

# Initialize services (will be done on startup)
session_manager: SessionManager = None
document_loader: DocumentLoader = None
page_extractor: PageExtractor = None
query_matcher: Optional[QueryMatcher] = None


@app.on_event("startup")
async def startup_event():
    """Initialize services on startup."""
    global session_manager, document_loader, page_extractor, query_matcher

    if LOG_FORMAT == "json":
        setup_logging(LOG_LEVEL)

    logger.info("Initializing PageSift services...")

    try:
        session_manager = SessionManager()

        renderer_config = RendererConfig.from_env()
        document_loader = DocumentLoader(PageRenderer(renderer_config))
        logger.info(f"Initialized DocumentLoader (render workers={renderer_config.workers})")

        page_extractor = PageExtractor()
        logger.info("Initialized PageExtractor")

        if GROQ_API_KEY:
            query_matcher = QueryMatcher(LLMClient(api_key=GROQ_API_KEY), QueryMatcherConfig.from_env())
            logger.info("Initialized QueryMatcher")
        else:
            logger.warning("GROQ_API_KEY not set, AI search is disabled")

        logger.info("All services initialized successfully")
    except Exception as e:
        logger.error(f"Failed to initialize services: {e}", exc_info=True)
        raise


@app.get("/")
async def root():
    """Health check endpoint."""
    return {"status": "ok", "message": "PageSift API"}


@app.get("/health")
async def health():
    """Detailed health check."""
    return {
        "status": "healthy",
        "service": "pagesift",
        "version": "1.0.0",
        "search_enabled": query_matcher is not None,
        "active_sessions": session_manager.count()
    }


@app.post("/sessions", response_model=SessionResponse)
async def create_session() -> SessionResponse:
    session = session_manager.create_session()
    return _session_response(session)


@app.get("/sessions/{session_id}", response_model=SessionResponse)
async def get_session(session_id: str) -> SessionResponse:
    return _session_response(_get_session(session_id))


@app.delete("/sessions/{session_id}")
async def delete_session(session_id: str):
    session = _get_session(session_id)
    if session.busy:
        raise HTTPException(status_code=409, detail="Session is busy")
    try:
        session_manager.delete_session(session_id)
    except SessionNotFoundError:
        raise HTTPException(status_code=404, detail="Session not found")
    return {"status": "deleted", "session_id": session_id}


@app.post("/sessions/{session_id}/reset", response_model=SessionResponse)
async def reset_session(session_id: str) -> SessionResponse:
    session = _get_session(session_id)
    if session.busy:
        raise HTTPException(status_code=409, detail="Session is busy")
    return _session_response(session_manager.reset(session_id))


@app.post("/sessions/{session_id}/document", response_model=DocumentResponse)
async def upload_document(session_id: str, file: UploadFile = File(...)) -> DocumentResponse:
    """
    Load a PDF into the session, replacing any previous document.

    Renders a thumbnail and extracts text for every page. On failure the
    session returns to IDLE with no document.

    Raises:
        HTTPException: 415 for non-PDF uploads, 413 for oversized files,
            409 if the session is busy, 422 if the PDF cannot be processed
    """
    session = _get_session(session_id)

    if file.content_type != "application/pdf":
        raise HTTPException(status_code=415, detail="Only PDF files are supported")

    data = await file.read()
    if len(data) > MAX_UPLOAD_MB * 1024 * 1024:
        raise HTTPException(status_code=413, detail=f"File exceeds {MAX_UPLOAD_MB}MB limit")

    try:
        session.begin(SessionStatus.LOADING)
    except SessionBusyError as e:
        raise HTTPException(status_code=409, detail=str(e))

    start_time = time.time()
    name = file.filename or "document.pdf"
    try:
        document = await run_in_threadpool(document_loader.load_with_pages, data, name)
    except LoadError as e:
        logger.error(f"Load failed for session {session_id}: {e}")
        session.document = None
        session.selection.clear()
        session.finish(SessionStatus.IDLE, error=LOAD_FAILED_MESSAGE)
        raise HTTPException(status_code=422, detail=LOAD_FAILED_MESSAGE)
    except Exception as e:
        logger.error(f"Unexpected error loading document: {e}", exc_info=True)
        session.document = None
        session.selection.clear()
        session.finish(SessionStatus.IDLE, error=LOAD_FAILED_MESSAGE)
        raise HTTPException(status_code=500, detail=f"Internal server error: {str(e)}")

    session.document = document
    session.selection.clear()
    session.last_query = ""
    session.finish(SessionStatus.READY)

    latency_ms = int((time.time() - start_time) * 1000)
    logger.info(f"Session {session_id} loaded {name}: {document.total_pages} pages in {latency_ms}ms")

    return DocumentResponse(
        document=_document_summary(session),
        pages=[_page_preview(page) for page in document.pages]
    )


@app.get("/sessions/{session_id}/pages", response_model=List[PagePreview])
async def list_pages(session_id: str):
    session = _get_session(session_id)
    _require_document(session)
    return [_page_preview(page) for page in session.document.pages]


@app.post("/sessions/{session_id}/selection/toggle", response_model=SelectionResponse)
async def toggle_page(session_id: str, request: ToggleRequest) -> SelectionResponse:
    session = _get_session(session_id)
    _require_document(session)
    session.selection.toggle(request.index)
    return _selection_response(session)


@app.post("/sessions/{session_id}/selection/all", response_model=SelectionResponse)
async def select_all(session_id: str) -> SelectionResponse:
    session = _get_session(session_id)
    _require_document(session)
    session.selection.select_all(session.document.total_pages)
    return _selection_response(session)


@app.put("/sessions/{session_id}/selection", response_model=SelectionResponse)
async def replace_selection(session_id: str, request: ReplaceSelectionRequest) -> SelectionResponse:
    session = _get_session(session_id)
    _require_document(session)
    session.selection.replace(request.indices)
    return _selection_response(session)


@app.delete("/sessions/{session_id}/selection", response_model=SelectionResponse)
async def clear_selection(session_id: str) -> SelectionResponse:
    session = _get_session(session_id)
    _require_document(session)
    session.selection.clear()
    return _selection_response(session)


@app.post("/sessions/{session_id}/search", response_model=SearchResponse)
async def search_pages(session_id: str, request: SearchRequest) -> SearchResponse:
    """
    Ask the language model which pages match a query.

    A successful search replaces the selection with the suggested pages. An
    undecodable model reply counts as no suggestions and clears the selection.
    A failed request leaves the selection untouched and reports an error
    message instead of failing the request.
    """
    session = _get_session(session_id)
    _require_document(session)

    query = request.query.strip() if request.query else ""
    if not query:
        raise HTTPException(status_code=400, detail="Query field is required and cannot be empty")
    if query_matcher is None:
        raise HTTPException(status_code=503, detail="AI search is not configured")

    try:
        session.begin_search(query)
    except SessionBusyError as e:
        raise HTTPException(status_code=409, detail=str(e))

    try:
        result = await run_in_threadpool(query_matcher.match, query, session.document.pages)
    except Exception as e:
        logger.error(f"Unexpected error during search: {e}", exc_info=True)
        session.finish_search(error=SEARCH_FAILED_MESSAGE)
        raise HTTPException(status_code=500, detail=f"Internal server error: {str(e)}")

    if result.ok:
        session.selection.replace(result.indices)
        session.finish_search()
        error = None
    elif result.error_code == "DECODE_ERROR":
        logger.warning(f"Search reply for session {session_id} not decodable: {result.message}")
        session.selection.replace([])
        session.finish_search()
        error = None
    else:
        logger.warning(f"Search degraded for session {session_id}: {result.error_code} {result.message}")
        session.finish_search(error=SEARCH_FAILED_MESSAGE)
        error = SEARCH_FAILED_MESSAGE

    return SearchResponse(
        query=query,
        indices=result.indices,
        selection=_selection_response(session),
        error=error
    )


@app.post("/sessions/{session_id}/export")
async def export_pages(session_id: str) -> Response:
    """
    Build a PDF holding the selected pages in ascending order.

    The selection is never modified here, so a failed export can be retried.
    """
    session = _get_session(session_id)
    _require_document(session)

    indices = session.selection.sorted_indices()
    if not indices:
        raise HTTPException(status_code=400, detail="No pages selected")

    try:
        session.begin(SessionStatus.PROCESSING)
    except SessionBusyError as e:
        raise HTTPException(status_code=409, detail=str(e))

    document = session.document
    try:
        data = await run_in_threadpool(page_extractor.extract, document.raw_bytes, indices)
    except ExtractError as e:
        logger.error(f"Export failed for session {session_id}: {e}")
        session.finish(SessionStatus.READY, error=EXPORT_FAILED_MESSAGE)
        raise HTTPException(status_code=500, detail=EXPORT_FAILED_MESSAGE)
    except Exception as e:
        logger.error(f"Unexpected error during export: {e}", exc_info=True)
        session.finish(SessionStatus.READY, error=EXPORT_FAILED_MESSAGE)
        raise HTTPException(status_code=500, detail=f"Internal server error: {str(e)}")

    session.finish(SessionStatus.READY)
    filename = export_filename(document.name)
    logger.info(f"Session {session_id} exported {len(indices)} pages as {filename}")

    return Response(
        content=data,
        media_type="application/pdf",
        headers={"Content-Disposition": _content_disposition(filename)}
    )


def _get_session(session_id: str) -> Session:
    try:
        return session_manager.get_session(session_id)
    except SessionNotFoundError:
        raise HTTPException(status_code=404, detail="Session not found")


def _require_document(session: Session) -> None:
    if session.document is None:
        raise HTTPException(status_code=409, detail="No document loaded")


def _page_preview(page) -> PagePreview:
    return PagePreview(index=page.index, thumbnail=page.thumbnail, text_content=page.text_content)


def _document_summary(session: Session) -> Optional[DocumentSummary]:
    document = session.document
    if document is None:
        return None
    return DocumentSummary(
        name=document.name,
        size_bytes=document.size_bytes,
        total_pages=document.total_pages
    )


def _selection_response(session: Session) -> SelectionResponse:
    total = session.document.total_pages if session.document else 0
    return SelectionResponse(
        selected=session.selection.sorted_indices(),
        count=len(session.selection),
        total_pages=total
    )


def _session_response(session: Session) -> SessionResponse:
    return SessionResponse(
        session_id=session.session_id,
        status=session.status.value,
        document=_document_summary(session),
        selected=session.selection.sorted_indices(),
        last_query=session.last_query,
        search_in_progress=session.search_in_progress,
        error=session.error
    )


def _content_disposition(filename: str) -> str:
    ascii_name = filename.encode("ascii", "replace").decode("ascii").replace('"', "_")
    return f"attachment; filename=\"{ascii_name}\"; filename*=UTF-8''{quote(filename)}"


if __name__ == "__main__":
    import uvicorn
    logger.info(f"Starting PageSift API on port {PORT}")
    uvicorn.run(app, host="0.0.0.0", port=PORT)
