# =============================================================================
# core/models/ - Data Models
# =============================================================================
# This package contains the types shared by services and routers:
# - assets.py: asset references, uploads and per-field changes
# - schemas.py: per-entity slot schemas and parsed edit payloads
# - portfolio.py: Pydantic request/response schemas for the API
#
# These models define the "contract" between API and clients.
# =============================================================================

# -----------------------------------------------------------------------------
# Asset Models - stored objects and edits
# -----------------------------------------------------------------------------
from .assets import (
    AssetChange,
    AssetKind,
    AssetReference,
    Clear,
    IncomingFile,
    NoChange,
    Replace,
    SlotRule,
    StoredObject,
    change_from_value,
)

# -----------------------------------------------------------------------------
# Entity Schemas - profile / project / certificate
# -----------------------------------------------------------------------------
from .schemas import (
    CERTIFICATE,
    PROFILE,
    PROJECT,
    SCHEMAS,
    EntitySchema,
    RecordPayload,
    get_schema,
)

# -----------------------------------------------------------------------------
# API Models
# -----------------------------------------------------------------------------
from .portfolio import (
    CertificateCreate,
    CertificateUpdate,
    DescriptionRequest,
    DescriptionResponse,
    ProfileUpdate,
    ProjectCreate,
    ProjectUpdate,
)

__all__ = [
    # Assets
    "AssetChange",
    "AssetKind",
    "AssetReference",
    "Clear",
    "IncomingFile",
    "NoChange",
    "Replace",
    "SlotRule",
    "StoredObject",
    "change_from_value",
    # Schemas
    "CERTIFICATE",
    "PROFILE",
    "PROJECT",
    "SCHEMAS",
    "EntitySchema",
    "RecordPayload",
    "get_schema",
    # API
    "CertificateCreate",
    "CertificateUpdate",
    "DescriptionRequest",
    "DescriptionResponse",
    "ProfileUpdate",
    "ProjectCreate",
    "ProjectUpdate",
]
