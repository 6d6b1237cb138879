"""Allow ``python -m cha_mcp`` to run the server."""

import sys

from cha_mcp.cli import server_main

sys.exit(server_main())
