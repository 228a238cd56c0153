"""Gunicorn configuration for the Opal connector.

Secret Loading Priority (post_fork hook):
1. /run/secrets (Docker secrets) or environment variables
   → read by connector.config.settings when the worker builds the app

2. Azure Key Vault direct access (optional)
   → Only triggered when AZURE_USE_KEYVAULT=true and a secret is not
     already available; requires azure-identity and azure-keyvault-secrets
"""
import os

bind = os.environ.get("GUNICORN_BIND", "0.0.0.0:5000")
workers = int(os.environ.get("GUNICORN_WORKERS", "2"))
threads = int(os.environ.get("GUNICORN_THREADS", "4"))
timeout = int(os.environ.get("GUNICORN_TIMEOUT", "30"))
loglevel = os.environ.get("LOG_LEVEL", "info").lower()
accesslog = "-"
wsgi_app = "connector.wsgi:app"

# Environment variable -> Key Vault secret name (overridable)
SECRET_MAPPING = {
    "OPAL_SIGNING_SECRET": os.environ.get("AZURE_SECRET_OPAL_SIGNING_SECRET", "opal-signing-secret"),
    "AUTHENTIK_TOKEN": os.environ.get("AZURE_SECRET_AUTHENTIK_TOKEN", "authentik-token"),
    "CF_ACCESS_CLIENT_ID": os.environ.get("AZURE_SECRET_CF_ACCESS_CLIENT_ID", ""),
    "CF_ACCESS_CLIENT_SECRET": os.environ.get("AZURE_SECRET_CF_ACCESS_CLIENT_SECRET", ""),
}


def post_fork(server, worker):
    """
    Called just after a worker has been forked, before it loads the app.

    Fills missing secrets from Azure Key Vault when AZURE_USE_KEYVAULT=true.
    """
    use_kv = os.environ.get("AZURE_USE_KEYVAULT", "false").lower() == "true"
    if not use_kv:
        worker.log.info("Skipping Azure Key Vault direct access (AZURE_USE_KEYVAULT=false)")
        return

    missing = [env_name for env_name in SECRET_MAPPING if not os.environ.get(env_name)]
    if not missing:
        worker.log.info("All connector secrets already present in environment")
        return

    try:
        from azure.identity import DefaultAzureCredential
        from azure.keyvault.secrets import SecretClient
    except ImportError:
        worker.log.error("Azure Key Vault requested but azure-keyvault-secrets not installed")
        return

    vault_name = os.environ.get("AZURE_KEY_VAULT_NAME")
    if not vault_name:
        worker.log.error("AZURE_KEY_VAULT_NAME required when AZURE_USE_KEYVAULT=true")
        return

    vault_uri = f"https://{vault_name}.vault.azure.net"
    secret_client = SecretClient(vault_url=vault_uri, credential=DefaultAzureCredential())

    for env_name in missing:
        secret_name = SECRET_MAPPING[env_name].strip()
        if not secret_name:
            continue
        try:
            secret = secret_client.get_secret(secret_name)
            os.environ[env_name] = secret.value
            worker.log.info(f"Loaded secret '{secret_name}' into {env_name}")
        except Exception as exc:
            worker.log.error(f"Failed to load secret '{secret_name}': {exc}")
