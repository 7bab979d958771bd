"""
Publishing constants — moderation statuses, image source rules, Shopify payload defaults.
"""

# Moderation statuses (products.status)
STATUS_DRAFT: str = "draft"
STATUS_PENDING: str = "pending"
STATUS_APPROVED: str = "approved"
STATUS_REJECTED: str = "rejected"

# Publish sub-state of an approved product (products.publish_state)
PUBLISH_STATE_PUBLISHED: str = "published"
PUBLISH_STATE_FAILED: str = "publish_failed"

# Statuses each moderation action may start from. Approving an approved
# product is only allowed while its last publish failed (operator retry).
APPROVABLE_STATUSES: frozenset[str] = frozenset({STATUS_PENDING, STATUS_APPROVED})
REJECTABLE_STATUSES: frozenset[str] = frozenset({STATUS_PENDING, STATUS_APPROVED})

DEFAULT_REJECTION_NOTE: str = "Product did not meet our quality standards"
PUBLISH_FAILURE_NOTE_PREFIX: str = "Approved but Shopify publish failed"

# Catalog payload defaults
DEFAULT_VENDOR_NAME: str = "Unknown"
DEFAULT_WEIGHT_UNIT: str = "kg"
ALLOWED_WEIGHT_UNITS: frozenset[str] = frozenset({"g", "kg", "oz", "lb"})
TAG_SEPARATOR: str = ", "
PRODUCT_STATUS_ACTIVE: str = "active"

# Image sources the server can never fetch
BLOCKED_SOURCE_SCHEMES: frozenset[str] = frozenset({"blob", "data", "file", "about", "javascript"})
FETCHABLE_SOURCE_SCHEMES: frozenset[str] = frozenset({"http", "https"})
LOCAL_HOSTNAMES: frozenset[str] = frozenset({"localhost", "localhost.localdomain", "ip6-localhost"})
LOCAL_HOST_SUFFIXES: tuple[str, ...] = (".localhost", ".local")
MAX_SOURCE_REDIRECTS: int = 5

# Staged uploads
STAGED_UPLOAD_RESOURCE: str = "IMAGE"
STAGED_UPLOAD_HTTP_METHOD: str = "POST"
STAGED_UPLOAD_FILE_FIELD: str = "file"
DEFAULT_IMAGE_MIME_TYPE: str = "image/jpeg"
DEFAULT_IMAGE_FILENAME: str = "product-image.jpg"

STAGED_UPLOADS_CREATE_MUTATION: str = """
    mutation stagedUploadsCreate($input: [StagedUploadInput!]!) {
        stagedUploadsCreate(input: $input) {
            stagedTargets {
                url
                resourceUrl
                parameters { name value }
            }
            userErrors { field message }
        }
    }
"""

# Cheap authenticated read used to probe a cached credential
CREDENTIAL_PROBE_PATH: str = "/shop.json"
