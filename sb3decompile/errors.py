"""Exceptions raised by the converter."""


class ProjectInputError(Exception):
    """The packaged project is missing or does not contain a project.json."""


class StructuralOverflow(Exception):
    """A block chain is cyclic or exceeds the traversal bounds."""

    def __init__(self, message: str, block_id: str | None = None) -> None:
        super().__init__(message)
        self.block_id = block_id
