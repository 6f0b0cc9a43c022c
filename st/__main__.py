import logging
import sys
from typing import List, Optional

import uvicorn

from st import config
from st.app import create_app
from st.errors import StorageError
from st.store import LinkStore
from st.tokens import TokenRegistry

logger = logging.getLogger("st")


def main(argv: Optional[List[str]] = None) -> None:
    args = config.parse_args(argv)
    logging.basicConfig(level=config.LOG_LEVEL, format=config.LOG_FORMAT)

    store = LinkStore(args.db)
    try:
        store.initialize()
    except StorageError as e:
        logger.critical("%s", e)
        sys.exit(1)

    app = create_app(store, TokenRegistry(max_age=config.TOKEN_MAX_AGE))
    logger.info("Listening on port %d", args.port)
    uvicorn.run(app, host=config.HOST, port=args.port, log_level=config.LOG_LEVEL.lower(),
                # requests are already logged by the app middleware
                access_log=False)


if __name__ == "__main__":
    main()
