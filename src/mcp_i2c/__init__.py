"""
I2C MCP Server - i2c-tools over MCP and REST.

This package validates I2C read/write requests, runs the matching i2c-tools
binary (i2cget / i2cset), and serves the result over a JSON-RPC stdio MCP
transport and a FastAPI HTTP application.
"""

__version__ = "1.0.1"
