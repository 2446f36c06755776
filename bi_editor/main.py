"""
main.py - Main entry point for the BI editor
"""
import logging

import uvicorn

from bi_editor.config import EditorConfig
from bi_editor.rest_api import create_api


def main():
    """
    Start the BI editor server.
    """
    config = EditorConfig.from_env()
    config.validate()

    logging.basicConfig(level=config.log_level)
    logger = logging.getLogger(__name__)

    api = create_api(config)
    app = api.get_app()

    logger.info("BI editor listening on http://%s:%d", config.host, config.port)
    logger.info("Database: %s, table: %s, pk: %s, limit: %d",
                config.database, config.table, ",".join(config.pk_columns), config.row_limit)

    uvicorn.run(app, host=config.host, port=config.port)


if __name__ == "__main__":
    main()
