"""Application constants."""

USER_AGENT = "easgeo/0.3 (+attestation containment checks)"

ZERO_UID = "0x" + "0" * 64
LOCATION_UID_FIELD = "locationUID"
GEOMETRY_FIELDS = ("location", "coordinates", "geometry")
SRS_FIELD = "srs"
DEFAULT_SRS = "EPSG:4326"

DEFAULT_CHAINS = {
    1: {"name": "mainnet", "endpoint": "https://mainnet.easscan.org/graphql"},
    10: {"name": "optimism", "endpoint": "https://optimism.easscan.org/graphql"},
    11155111: {"name": "sepolia", "endpoint": "https://sepolia.easscan.org/graphql"},
}

COMMANDS = ("check", "chains")
EXIT_SUCCESS = 0
EXIT_PARTIAL = 10
EXIT_HARD_FAIL = 20
JSON_LOG_FIELDS = (
    "timestamp",
    "run_id",
    "stage",
    "chain_id",
    "attestation_id",
    "event",
    "status",
    "count",
    "duration_ms",
    "error_code",
    "message",
)
