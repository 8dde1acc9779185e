import sys

from mcp_i2c.main import main

sys.exit(main())
