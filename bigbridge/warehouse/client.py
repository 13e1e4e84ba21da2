"""BigQuery client construction."""

import os

from google.cloud import bigquery

from bigbridge.core.config import Settings, settings
from bigbridge.core.errors import BigConfigError
from bigbridge.core.logging import get_logger

logger = get_logger(__name__)


def build_client(config: Settings | None = None) -> bigquery.Client:
    """Create a BigQuery client from settings.

    With BIG_AUTH_FILE set the service account key file is used; otherwise the
    client picks up application default credentials.
    """
    config = config or settings

    if not config.BIG_PROJECT_ID:
        raise BigConfigError("BIG_PROJECT_ID must be set to use the warehouse bridge")

    if config.BIG_AUTH_FILE:
        if not os.path.isfile(config.BIG_AUTH_FILE):
            raise BigConfigError(
                f"BIG_AUTH_FILE does not exist: {config.BIG_AUTH_FILE}",
                {"auth_file": config.BIG_AUTH_FILE},
            )
        logger.info(
            "bigquery_client_key_file",
            extra={"event": "bigquery_client_key_file", "project": config.BIG_PROJECT_ID},
        )
        return bigquery.Client.from_service_account_json(
            config.BIG_AUTH_FILE, project=config.BIG_PROJECT_ID
        )

    logger.info(
        "bigquery_client_default_credentials",
        extra={"event": "bigquery_client_default_credentials", "project": config.BIG_PROJECT_ID},
    )
    return bigquery.Client(project=config.BIG_PROJECT_ID)
