"""
Session authentication for the administrative routes.

Responsibilities:
- Seed bcrypt-hashed accounts from configuration
- Provide FastAPI dependencies that gate routes by role
"""
