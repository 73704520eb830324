"""
Streamlit error display components.

Errors reach the user in three ways: failed list fetches render an error
state in place of the list, write failures arrive as toast notifications,
and anything unexpected inside an :func:`error_context` block is classified
and shown as an alert.
"""

from collections.abc import Callable, Iterator
from contextlib import contextmanager, nullcontext
from typing import Any

import streamlit as st
from streamlit.runtime.scriptrunner_utils.exceptions import RerunException, StopException

from ...error_handling import ErrorInfo, ErrorSeverity, handle_error
from ...logging_config import get_logger
from ...services.family_data import FetchResult

logger = get_logger(__name__)

ALERTS: dict[ErrorSeverity, Callable[..., Any]] = {
    ErrorSeverity.CRITICAL: st.error,
    ErrorSeverity.HIGH: st.error,
    ErrorSeverity.MEDIUM: st.warning,
    ErrorSeverity.LOW: st.info,
}


class ErrorDisplayManager:
    """Shows classified errors as Streamlit alerts."""

    def display_error(self, error_info: ErrorInfo, container: Any = None, show_details: bool = False) -> None:
        """
        Args:
            error_info: Classified error
            container: Streamlit container to render into (current position when None)
            show_details: Add an expander with the code, category and logged details
        """
        with container if container is not None else nullcontext():
            ALERTS[error_info.severity](error_info.user_message)
            if show_details:
                with st.expander("Details", expanded=False):
                    st.caption(
                        f"{error_info.code} · {error_info.category.value} · {error_info.timestamp:%Y-%m-%d %H:%M:%S}"
                    )
                    st.json(error_info.details)

        logger.info(
            "error_displayed_to_user",
            error_code=error_info.code,
            category=error_info.category.value,
            severity=error_info.severity.value,
        )

    def display_exception(
        self,
        exception: Exception,
        context: dict[str, Any] | None = None,
        container: Any = None,
        show_details: bool = False,
    ) -> ErrorInfo:
        error_info = handle_error(exception, context)
        self.display_error(error_info, container=container, show_details=show_details)
        return error_info


error_display_manager = ErrorDisplayManager()


def get_error_display_manager() -> ErrorDisplayManager:
    return error_display_manager


def render_fetch_error(what: str, result: FetchResult[Any]) -> bool:
    """
    Render the error state for a failed fetch.

    Returns:
        bool: True if ``result`` failed and an error state was rendered
    """
    if result.ok:
        return False
    st.error(f"⚠️ Could not load {what}. The family records are unavailable right now.")
    if st.session_state.get("debug_mode"):
        st.caption(result.error)
    if st.button("🔄 Try again", key=f"retry_{what}"):
        st.rerun()
    return True


@contextmanager
def error_context(show_details: bool = False, container: Any = None) -> Iterator[None]:
    """
    Show any exception raised inside the block as an alert instead of a traceback.

    ``st.rerun()`` and ``st.stop()`` pass through untouched.
    """
    try:
        yield
    except (RerunException, StopException):
        raise
    except Exception as e:
        error_display_manager.display_exception(e, container=container, show_details=show_details)
