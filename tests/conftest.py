"""Test environment: configure settings before any streamgate module is imported."""

import os

os.environ["APP_ENV"] = "dev"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET"] = "test-secret-key-for-streamgate-unit-tests"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["DEFAULT_ADMIN_EMAIL"] = ""
os.environ["DEFAULT_ADMIN_USERNAME"] = ""
os.environ.pop("DEFAULT_ADMIN_PASSWORD", None)
