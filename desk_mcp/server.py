"""
MCP Server for IKEA Standing Desk Control.

Exposes desk control as tools that LLMs can call via the Model Context Protocol.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastmcp import Context, FastMCP

from bledesk import (
    MAX_HEIGHT_CM,
    MIN_HEIGHT_CM,
    ConnectFailedError,
    ConnectTimeoutError,
    DeskError,
    DeskSession,
    DeskSettings,
    NoProgressError,
    TransportError,
)
from bledesk.config import load_config
from bledesk.controller import ControllerConfig

# Create MCP server
mcp = FastMCP(
    "Standing Desk Controller",
    instructions="Control your IKEA Idåsen / Linak standing desk via BLE. "
    "Tools: get_height (check position), move_to_height (absolute positioning in cm), "
    "save_favorite/move_to_favorite/list_favorites/delete_favorite (named heights), "
    "stop_desk (emergency stop).",
)


def load_settings() -> DeskSettings:
    return DeskSettings.load(load_config().settings_path)


@asynccontextmanager
async def get_desk() -> AsyncIterator[DeskSession]:
    """Context manager for desk connection with automatic cleanup."""
    config = load_config()
    target = DeskSettings.load(config.settings_path).name or config.desk
    if not target:
        raise ConnectFailedError("No desk configured. Set BLEDESK_DESK or run `bledesk --desk <name>` once.")

    desk = await DeskSession.connect(
        target,
        timeout=config.connect_timeout,
        controller_config=ControllerConfig(interval=config.poll_interval),
        quiet=True,
    )
    async with desk:
        yield desk


def describe_error(e: DeskError) -> str:
    if isinstance(e, ConnectTimeoutError):
        return "Error: Desk not found. Is it powered on?"
    if isinstance(e, ConnectFailedError):
        return f"Error: Could not connect to desk - {e}"
    if isinstance(e, TransportError):
        return f"Error: Communication failed - {e}"
    if isinstance(e, NoProgressError):
        return f"Error: Desk stopped moving - {e}"
    return f"Error: {e}"


@mcp.tool()
async def get_height(ctx: Context) -> str:
    """
    Get the current desk height.

    Returns the height in centimeters.
    """
    try:
        async with get_desk() as desk:
            height = await desk.current_position()
            return f"Current height: {height:.2f} cm"
    except DeskError as e:
        return describe_error(e)


@mcp.tool()
async def move_to_height(ctx: Context, height_cm: float) -> str:
    """
    Move the desk to a specific height in centimeters.

    Args:
        height_cm: Target height in centimeters (valid range: 65-128 cm)

    Returns:
        Result of the movement including final height.
    """
    if not MIN_HEIGHT_CM <= height_cm <= MAX_HEIGHT_CM:
        return f"Error: Height must be between {MIN_HEIGHT_CM:g} and {MAX_HEIGHT_CM:g} cm"

    try:
        async with get_desk() as desk:
            result = await desk.move_to(height_cm)
            return f"Moved to {result.final_height:.2f} cm. Target was {height_cm:.2f} cm, error: {result.error:.2f} cm"
    except DeskError as e:
        return describe_error(e)


@mcp.tool()
async def stop_desk(ctx: Context) -> str:
    """
    Emergency stop - immediately halt desk movement.

    Use this if the desk is moving and you need to stop it immediately.
    """
    try:
        async with get_desk() as desk:
            await desk.stop()
            height = await desk.current_position()
            return f"Desk stopped at {height:.2f} cm"
    except DeskError as e:
        return describe_error(e)


@mcp.tool()
async def save_favorite(ctx: Context, name: str) -> str:
    """
    Save the current desk height under a name.

    Args:
        name: Favorite name, e.g. "sit" or "stand"

    Returns:
        Confirmation of the saved height.
    """
    try:
        settings = load_settings()
        async with get_desk() as desk:
            height = await desk.current_position()
        settings.add_fav(name, height)
        return f"Saved '{name}' at {height:.2f} cm"
    except DeskError as e:
        return describe_error(e)


@mcp.tool()
async def move_to_favorite(ctx: Context, name: str) -> str:
    """
    Move the desk to a saved favorite height.

    Args:
        name: Favorite name previously stored with save_favorite

    Returns:
        Final height after the move.
    """
    try:
        height = load_settings().get_fav(name)
        if height is None:
            return f"Error: No such favorite '{name}'"
        async with get_desk() as desk:
            result = await desk.move_to(height)
            return f"Moved to '{name}': {result.final_height:.2f} cm"
    except DeskError as e:
        return describe_error(e)


@mcp.tool()
async def list_favorites(ctx: Context) -> str:
    """List saved favorite heights."""
    try:
        return load_settings().list_positions()
    except DeskError as e:
        return describe_error(e)


@mcp.tool()
async def delete_favorite(ctx: Context, name: str) -> str:
    """
    Delete a saved favorite height.

    Args:
        name: Favorite to remove
    """
    try:
        if load_settings().del_fav(name):
            return f"Deleted '{name}'"
        return f"Error: No such favorite '{name}'"
    except DeskError as e:
        return describe_error(e)


def run_server():
    """Run the MCP server."""
    mcp.run()


if __name__ == "__main__":
    run_server()
