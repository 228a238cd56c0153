"""Opal custom-app connector for Authentik.

To use the Flask app:
    from connector.flask_app import create_app

To use the directory operations directly:
    from connector.core.directory_service import DirectoryService
"""
# Note: We don't import flask_app by default so the core and the scripts can
# be used without building an application
