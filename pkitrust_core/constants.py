# pkitrust_core/constants.py

# partition directory names under the PKI root
TRUSTED = "trusted"
REJECTED = "rejected"
OWN = "own"

PEM_SUFFIX = ".pem"

# SHA-1 over DER, lowercase hex
THUMBPRINT_LENGTH = 40

DEFAULT_PKI_ROOT = "pki"
DEFAULT_KEY_BITS = 2048
ALLOWED_KEY_BITS = (1024, 2048, 4096)
DEFAULT_DURATION_DAYS = 365
DEFAULT_COMMON_NAME = "PKITrust"

# openssl refuses subjectAltName URIs longer than this
MAX_APPLICATION_URI_LENGTH = 64
