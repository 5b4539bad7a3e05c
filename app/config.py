import os

DYNAMODB_ENDPOINT_URL = os.getenv("DYNAMODB_ENDPOINT_URL", "http://dynamodb-local:8000")
AWS_DEFAULT_REGION = os.getenv("AWS_DEFAULT_REGION", "us-east-1")
AWS_ACCESS_KEY_ID = os.getenv("AWS_ACCESS_KEY_ID", "fake")
AWS_SECRET_ACCESS_KEY = os.getenv("AWS_SECRET_ACCESS_KEY", "fake")

TABLE_NAME = os.getenv("TABLE_NAME", "EventBooking")

# "dynamodb" or "memory"
STORE_BACKEND = os.getenv("STORE_BACKEND", "dynamodb")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Compare-and-swap attempts for release/resize before giving up
RELEASE_MAX_ATTEMPTS = int(os.getenv("RELEASE_MAX_ATTEMPTS", "10"))
