"""
Server instructions - sent to the client during the MCP handshake
"""

SERVER_INSTRUCTIONS = """
YepCode MCP server connected. Tools run against your YepCode workspace.

## Running code
- run_code - execute JavaScript or Python in a YepCode sandbox (code, options)
  Returns logs plus returnValue, or logs plus error when the code fails.
- Environment variables set with set_env_var are available to later runs.

## Processes
- Processes exposed as tools are named after their slug (or run_ycp_<id>).
- synchronousExecution=false returns {executionId}; poll it with get_execution.

## Files
- upload_object / download_object move files between you and YepCode Storage.
  Binary content travels as {data, encoding: "base64"}.

Errors are returned as {"error": "..."} with isError=true.
"""
