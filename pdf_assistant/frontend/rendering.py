from typing import Protocol

import streamlit as st


class MarkdownRenderer(Protocol):
    def render(self, markdown: str) -> None:
        ...


class StreamlitMarkdownRenderer:
    """Renders into one placeholder, replacing the previous content each time."""

    def __init__(self, container=None):
        self.placeholder = (container or st).empty()

    def render(self, markdown: str) -> None:
        self.placeholder.markdown(markdown)
