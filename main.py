#!/usr/bin/env python3
"""Tea catalog MCP server - main entry point.

Serves the tea catalog over stdin/stdout using newline-delimited JSON-RPC 2.0.

================================================================================
DEVELOPER GUIDE: Adding Tools and Resources
================================================================================

1. CREATE YOUR PLUGIN
   Create a new module in src/cha_mcp/plugins/ implementing PluginBase.
   get_tools()/execute() provide tools; get_resources()/read_resource()
   provide resources. See src/cha_mcp/plugins/teas.py for an example.

2. REGISTER THE PLUGIN
   Add it to the plugin list in create_server() (src/cha_mcp/server.py):

       registry = CapabilityRegistry.from_plugins(
           [TeaCatalogPlugin(load_catalog(config.catalog_path)), MyPlugin()]
       )

   The registry rejects duplicate tool names, duplicate resource URIs and
   input schemas that are not valid JSON Schema.

NOTES
-----
- Report bad argument values as ordinary content ({"error": ...}); protocol
  errors are reserved for unknown tools/resources and missing parameters.
- Never print to stdout from a plugin: stdout carries the protocol.

================================================================================
"""

from __future__ import annotations

import sys

from cha_mcp.cli import server_main

if __name__ == "__main__":
    sys.exit(server_main())
