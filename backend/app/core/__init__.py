# app/core/__init__.py
"""
Core application modules.
Contains essential infrastructure components:
- db: Database configuration and connection management
- errors: Service error taxonomy and its HTTP mapping
- security: Password hashing, password policy and session tokens
"""
