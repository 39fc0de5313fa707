"""
Top-level test configuration for EventHub.
"""

import os

# Ensure test-friendly defaults
os.environ.setdefault("EVENTHUB_AUTH__CREDENTIAL_STORE", "memory")
os.environ.setdefault("EVENTHUB_JSON_LOGS", "false")
os.environ.setdefault("EVENTHUB_LOG_LEVEL", "DEBUG")
os.environ.setdefault("EVENTHUB_AUTH_API__BASE_URL", "http://auth.test/api")
