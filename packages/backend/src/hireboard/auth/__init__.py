"""Authentication and authorization.

Users log in with email/password and get JWT access/refresh tokens.
The access token carries the user id and role; route dependencies turn
it into a CurrentIdentity and check the role where a route requires one.
"""
