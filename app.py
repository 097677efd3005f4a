"""Web chat client using Streamlit."""

import httpx
import streamlit as st

from migrassist.client import ChatClient, split_follow_up_questions
from migrassist.config import config

config.setup_logging()
logger = config.get_logger(__name__)

WELCOME = "Hi! Ask me anything about moving abroad: visas, jobs, housing, culture."


class SessionState:
    """Centralized session state management."""

    @staticmethod
    def initialize() -> None:
        """Initialize all session state variables."""
        defaults = {
            "messages": [],
            "follow_ups": [],
            "pending_question": None,
        }

        for key, default_value in defaults.items():
            if key not in st.session_state:
                st.session_state[key] = default_value

    @staticmethod
    def reset() -> None:
        """Start a new conversation."""
        st.session_state.messages = []
        st.session_state.follow_ups = []
        st.session_state.pending_question = None


@st.cache_resource
def get_client() -> ChatClient:
    return ChatClient(config.API_URL)


def render_sidebar() -> None:
    """Render the sidebar with the API location and conversation controls."""
    with st.sidebar:
        st.header("Settings")
        st.write(f"**API:** {config.API_URL}")
        st.divider()
        if st.button("New conversation", use_container_width=True):
            SessionState.reset()
            st.rerun()


def render_history() -> None:
    """Render previous turns of the conversation."""
    with st.chat_message("assistant"):
        st.write(WELCOME)
    for message in st.session_state.messages:
        with st.chat_message(message["role"]):
            st.write(message["content"])


def render_follow_ups() -> None:
    """Offer the suggested follow-up questions as buttons."""
    for i, question in enumerate(st.session_state.follow_ups):
        if st.button(question, key=f"follow_up_{i}"):
            st.session_state.pending_question = question
            st.rerun()


def ask(question: str) -> None:
    """Send the conversation and stream the answer into the page."""
    st.session_state.messages.append({"role": "user", "content": question})
    with st.chat_message("user"):
        st.write(question)

    with st.chat_message("assistant"):
        try:
            answer = st.write_stream(
                get_client().stream_answer(st.session_state.messages)
            )
        except (RuntimeError, ValueError, httpx.HTTPError) as e:
            logger.exception("Chat request failed")
            st.error(f"Failed to get an answer: {e}")
            st.session_state.messages.pop()
            return

    text, follow_ups = split_follow_up_questions(str(answer))
    st.session_state.messages.append({"role": "assistant", "content": text})
    st.session_state.follow_ups = follow_ups
    st.rerun()


def main() -> None:
    """Main entry point for the Streamlit chat client."""
    st.set_page_config(page_title="Migration Assistant", layout="centered")
    SessionState.initialize()

    st.title("Migration Assistant")
    render_sidebar()
    render_history()
    render_follow_ups()

    question = st.chat_input("Ask a question about migrating...")
    if st.session_state.pending_question:
        question = st.session_state.pending_question
        st.session_state.pending_question = None
    if question:
        ask(question)


if __name__ == "__main__":
    main()
