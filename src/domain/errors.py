class BoardError(Exception):
    """Base for collaborator failures that abort a user-facing operation."""


class StoreError(BoardError):
    pass


class ExtractionError(BoardError):
    pass


class RenderError(BoardError):
    pass
