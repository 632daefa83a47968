"""Test environment: in-memory SQLite and throwaway key material, set before the app is imported."""

import os

os.environ["APP_ENV"] = "dev"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ENCRYPTION_KEY"] = "8f3a1c2b7d4e6f9081a2b3c4d5e6f708192a3b4c5d6e7f8091a2b3c4d5e6f7a8"
os.environ["JWT_SECRET"] = "unit-test-jwt-secret-that-is-long-enough-0123456789"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["LOG_LEVEL"] = "WARNING"
