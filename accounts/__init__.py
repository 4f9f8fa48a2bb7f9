"""
Accounts Module

User signup and session tokens (connect/disconnect).
"""
