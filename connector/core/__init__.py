"""Core connector logic, independent of Flask.

Module Structure:
    - authentik/            : Low-level Authentik API client
    - directory_service.py  : Opal operations on users, groups and memberships
    - pagination.py         : Opal cursor ⇄ Authentik page number
    - signature.py          : Opal request signature (HMAC-SHA256)
    - errors.py             : Error taxonomy and Authentik error translation
    - opal_transformer.py   : Authentik → Opal payloads
    - validators.py         : Identifier and body validation

Usage Pattern:
    Import explicitly when needed:
        from connector.core.directory_service import DirectoryService
        from connector.core.signature import verify_signature
        from connector.core.errors import DirectoryError
"""
