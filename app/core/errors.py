"""Error taxonomy for migrated-token ingestion and the token catalogue."""


class IngestionError(Exception):
    """Base class for failures inside the sync pipeline."""


class UpstreamUnavailable(IngestionError):
    """The graduated-token list could not be fetched or decoded."""


class MetadataNotFound(IngestionError):
    """The metadata feed has no record for an address."""

    def __init__(self, address: str):
        super().__init__(f"No upstream metadata for {address}")
        self.address = address


class MissingAddress(IngestionError):
    """An upstream record carries no resolvable on-chain address."""

    def __init__(self, message: str = "Token missing mint address"):
        super().__init__(message)


class ValidationFailure(IngestionError):
    """A normalized record failed a required-field check."""


class TokenNotFound(Exception):
    def __init__(self, token_id: str):
        super().__init__(f"Token '{token_id}' not found")
        self.token_id = token_id


class TokenConflict(Exception):
    """A catalogue write clashed with an existing slug or address."""
