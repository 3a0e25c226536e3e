"""Authentication and authorization.

Learn: Students log in with email/password and get back a JWT access
token. Each request turns that token into an AuthContext; mutating
operations refuse to run without an authenticated one, and project
mutations are further scoped to the project's owner.
"""
