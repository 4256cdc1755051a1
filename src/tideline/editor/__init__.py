"""Editor package containing document models, editing hooks and widgets."""

from . import document_model, editor_widget

__all__ = ["document_model", "editor_widget"]
