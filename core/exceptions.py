"""
Error taxonomy for the PDF editor.

Invalid user input is rejected before any library call; library and
model failures are caught at the call site and surfaced to the client.
"""


class PdfEditorError(Exception):
    """Base class for editor errors."""


class InvalidInputError(PdfEditorError):
    """User input rejected by a guard clause."""


class InvalidPageError(InvalidInputError):
    pass


class LastPageRemovalError(InvalidInputError):
    def __init__(self, message: str = "Cannot remove the only page of a document."):
        super().__init__(message)


class UnsupportedFileTypeError(InvalidInputError):
    def __init__(self, mime_type: str, message: str = None):
        super().__init__(message or f"Unsupported file type: '{mime_type}'")
        self.mime_type = mime_type


class DocumentNotFound(PdfEditorError):
    pass


class DocumentBusyError(PdfEditorError):
    def __init__(self, document_id: str):
        super().__init__(f"Document '{document_id}' is already being processed")
        self.document_id = document_id


class TextExtractionError(PdfEditorError):
    pass
