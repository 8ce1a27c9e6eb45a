"""Custom exceptions for promptblocks."""


class PromptBlocksError(Exception):
    """Base class for promptblocks errors."""


class ElementNotFoundError(PromptBlocksError):
    """Raised when an update targets an element id the document does not hold.

    Attributes:
        element_id: The unknown element id
    """

    def __init__(self, element_id: str):
        self.element_id = element_id
        super().__init__(f"No element with id: {element_id}")


class BlockNotFoundError(PromptBlocksError):
    """Raised when a block library lookup is required to succeed and fails.

    Rendering never raises this; missing blocks render as empty text.

    Attributes:
        block_id: The unknown block id
    """

    def __init__(self, block_id: int):
        self.block_id = block_id
        super().__init__(f"Block not found: {block_id}")


class BlockLibraryError(PromptBlocksError):
    """Raised when the block library file cannot be read or is invalid.

    Attributes:
        path: Path to the library file
        message: Human-readable error message
    """

    def __init__(self, path: str, message: str = "Invalid block library"):
        self.path = path
        self.message = message
        super().__init__(f"{message}: {path}")


class SessionNotFoundError(PromptBlocksError):
    """Raised when a session key is not open in the SessionController.

    Attributes:
        key: The unknown session key
    """

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"No open session: {key}")
