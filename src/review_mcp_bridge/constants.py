"""Google Business Profile endpoints and service limits."""

# OAuth endpoints
OAUTH_AUTHORIZE_URL = "https://accounts.google.com/o/oauth2/v2/auth"
OAUTH_TOKEN_URL = "https://oauth2.googleapis.com/token"  # noqa: S105
OAUTH_REVOKE_URL = "https://oauth2.googleapis.com/revoke"

OAUTH_SCOPES = [
    "https://www.googleapis.com/auth/business.manage",
    "https://www.googleapis.com/auth/userinfo.email",
    "https://www.googleapis.com/auth/userinfo.profile",
]

# API base URLs
REVIEWS_API_BASE = "https://mybusiness.googleapis.com/v4"
ACCOUNT_MANAGEMENT_API_BASE = "https://mybusinessaccountmanagement.googleapis.com/v1"
BUSINESS_INFORMATION_API_BASE = "https://mybusinessbusinessinformation.googleapis.com/v1"

LOCATION_READ_MASK = "name,title,storefrontAddress,websiteUri,phoneNumbers"
PROFILE_READ_MASK = (
    "name,title,storefrontAddress,websiteUri,phoneNumbers,"
    "categories,languageCode,profile"
)

# Limits
DEFAULT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 50
MAX_REPLY_LENGTH = 4096
ACCOUNTS_PAGE_SIZE = 100
DEFAULT_MAX_PAGES = 100

# Used when the token endpoint omits expires_in
DEFAULT_TOKEN_LIFETIME_SECONDS = 3600
