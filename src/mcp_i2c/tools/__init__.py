"""
MCP tool and method handlers for the I2C MCP Server.

- i2c: the i2cget / i2cset tool definitions and their dispatch
- methods: JSON-RPC method handlers (initialize, tools/list, tools/call, ...)
"""
