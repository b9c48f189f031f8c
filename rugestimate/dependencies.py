"""FastAPI dependency injection for the in-memory session stores."""

from fastapi import Request

from rugestimate.repositories.session_store import SessionStore
from rugestimate.services.edit_session import AnnotationEditSession
from rugestimate.services.report_parser import ReportTextParser
from rugestimate.services.selection_engine import SelectionEngine


def get_parser(request: Request) -> ReportTextParser:
    """Return the application-wide ReportTextParser stored on app.state."""
    return request.app.state.parser


def get_annotation_sessions(request: Request) -> SessionStore[AnnotationEditSession]:
    """Return the annotation editing session store stored on app.state."""
    return request.app.state.annotation_sessions


def get_selection_sessions(request: Request) -> SessionStore[SelectionEngine]:
    """Return the client selection session store stored on app.state."""
    return request.app.state.selection_sessions
