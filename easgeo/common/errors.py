"""Domain errors and failure typing."""


class PipelineError(Exception):
    """Base class for pipeline failures."""

    error_code = "PIPELINE_ERROR"


class ConfigError(PipelineError):
    """Raised for invalid or missing configuration."""

    error_code = "CONFIG_ERROR"


class StageError(PipelineError):
    """Raised when a pipeline stage cannot complete."""

    error_code = "STAGE_ERROR"


class UnsupportedChainError(PipelineError):
    """Raised when no store endpoint is configured for a chain id."""

    error_code = "UNSUPPORTED_CHAIN"

    def __init__(self, chain_id: int) -> None:
        super().__init__(f"Unsupported chainId: {chain_id}")
        self.chain_id = chain_id


class StoreUnreachableError(StageError):
    """Raised for transport-level failures talking to the attestation store."""

    error_code = "STORE_UNREACHABLE"


class RootAttestationNotFoundError(StageError):
    error_code = "ROOT_ATTESTATION_NOT_FOUND"


class LocationReferenceMissingError(StageError):
    error_code = "LOCATION_REFERENCE_MISSING"


class NoReferencingAttestationsError(StageError):
    error_code = "NO_REFERENCING_ATTESTATIONS"


class BoundaryAttestationNotFoundError(StageError):
    error_code = "BOUNDARY_ATTESTATION_NOT_FOUND"


class ResolutionCancelledError(StageError):
    error_code = "RESOLUTION_CANCELLED"


class PayloadDecodeError(StageError):
    """Raised when an attestation payload cannot be decoded."""

    error_code = "PAYLOAD_DECODE_ERROR"


class InvalidGeometryError(PayloadDecodeError):
    """Raised when a decoded payload does not carry usable geometry."""

    error_code = "INVALID_GEOMETRY"
