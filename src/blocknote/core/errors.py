"""Exception taxonomy shared by the model, tagging, and store layers"""


class BlocknoteError(Exception):
    """Base class for all blocknote errors."""


class ValidationError(BlocknoteError, ValueError):
    """Malformed input to a model operation (block payload, cursor bounds, tags)."""


class NotFoundError(BlocknoteError, LookupError):
    """A referenced document or block id is not present."""


class PersistenceError(BlocknoteError, RuntimeError):
    """The underlying storage could not be read or written."""
