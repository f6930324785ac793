"""Names of the secret store namespace, items and fields used for Nexus."""

NAMESPACE = "nexus"
WILDCARD = "_wildcard"

CREDENTIALS_ITEM = "credentials"
REPOSITORIES_ITEM = "repositories"
CERTIFICATES_ITEM = "certificates"
SSL_CERTIFICATE_ITEM = "ssl_certificate"

SSL_CERTIFICATE_CRT = "crt"
SSL_CERTIFICATE_KEY = "key"

DEFAULT_ADMIN = "default_admin"
UPDATED_ADMIN = "updated_admin"
PREFER_UPDATED = "prefer_updated"

PROXY_REPOSITORIES = "proxy_repositories"
HOSTED_REPOSITORIES = "hosted_repositories"
GROUP_REPOSITORIES = "group_repositories"
