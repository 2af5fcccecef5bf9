"""MCP server exposing the generate_web_image tool over stdio."""

import asyncio
import base64
import logging
from typing import Any

from mcp import types
from mcp.server import Server
from mcp.server.stdio import stdio_server
from pydantic import ValidationError

from aipic.config import Settings
from aipic.logging_config import configure_logging
from aipic.models.image_responses import ImageGenerationResponse
from aipic.models.requests import DEFAULT_HEIGHT, DEFAULT_WIDTH, ImageGenerationRequest
from aipic.services.image_service import ImageService

logger = logging.getLogger(__name__)

SERVER_NAME = "aipic-mcp-server"
TOOL_NAME = "generate_web_image"

GENERATE_WEB_IMAGE_TOOL = types.Tool(
    name=TOOL_NAME,
    description=(
        "Generate AI images for web design using ModelScope or DashScope FLUX models. "
        "Perfect for creating placeholder images, hero images, product images, and other web assets."
    ),
    inputSchema={
        "type": "object",
        "properties": {
            "prompt": {
                "type": "string",
                "description": 'English prompt describing the image to generate (e.g., "A modern office workspace with laptop and coffee")',
            },
            "width": {
                "type": "integer",
                "description": f"Image width in pixels (default: {DEFAULT_WIDTH})",
                "default": DEFAULT_WIDTH,
            },
            "height": {
                "type": "integer",
                "description": f"Image height in pixels (default: {DEFAULT_HEIGHT})",
                "default": DEFAULT_HEIGHT,
            },
            "outputPath": {
                "type": "string",
                "description": "Optional path where to save the image (default: generated filename)",
            },
            "apiKey": {
                "type": "string",
                "description": (
                    "ModelScope (ms-...) or DashScope (sk-...) API key. "
                    "Optional when AIPIC_API_KEY, MODELSCOPE_API_KEY or DASHSCOPE_API_KEY is set."
                ),
            },
        },
        "required": ["prompt"],
    },
)

server = Server(SERVER_NAME)

_service: ImageService | None = None


def get_service() -> ImageService:
    """Get or create the shared image service."""
    global _service
    if _service is None:
        _service = ImageService(settings=Settings.from_env())
    return _service


def error_result(message: str) -> types.CallToolResult:
    return types.CallToolResult(
        content=[types.TextContent(type="text", text=f"Error generating image: {message}")],
        isError=True,
    )


def to_tool_result(response: ImageGenerationResponse) -> types.CallToolResult:
    """Translate a generation response into MCP content blocks."""
    if not response.success or response.result is None:
        return error_result(response.error.message if response.error else "Unknown error occurred")

    result = response.result
    summary = (
        "Successfully generated web design image!\n\n"
        f"Prompt: {result.prompt}\n"
        f"Dimensions: {result.dimensions}px\n"
        f"Saved to: {result.saved_path}\n"
    )
    if response.metrics and response.metrics.resized:
        summary += "\nThe image has been resized for web use and saved as a high-quality JPEG."

    return types.CallToolResult(
        content=[
            types.TextContent(type="text", text=summary),
            types.ImageContent(
                type="image",
                data=base64.b64encode(result.image_bytes).decode("ascii"),
                mimeType=result.mime_type,
            ),
        ],
        isError=False,
    )


def describe_validation_error(error: ValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(part) for part in err['loc']) or 'arguments'}: {err['msg']}" for err in error.errors()
    )


async def handle_generate_web_image(
    arguments: dict[str, Any],
    service: ImageService | None = None,
) -> types.CallToolResult:
    """Validate tool arguments, run one generation, and format the outcome."""
    try:
        request = ImageGenerationRequest.model_validate(arguments)
    except ValidationError as e:
        problems = describe_validation_error(e)
        return error_result(f"Invalid arguments: {problems}")

    if service is None:
        try:
            service = get_service()
        except ValidationError as e:
            logger.error(f"❌ [Server] Invalid configuration: {e}")
            return error_result(f"Invalid configuration: {describe_validation_error(e)}")

    response = await service.generate(request)
    return to_tool_result(response)


@server.list_tools()
async def list_tools() -> list[types.Tool]:
    """List available tools."""
    return [GENERATE_WEB_IMAGE_TOOL]


@server.call_tool()
async def call_tool(name: str, arguments: dict[str, Any] | None) -> types.CallToolResult:
    """Execute a tool."""
    if name == TOOL_NAME:
        return await handle_generate_web_image(arguments or {})
    return error_result(f"Unknown tool: {name}")


async def run() -> None:
    async with stdio_server() as (read_stream, write_stream):
        await server.run(read_stream, write_stream, server.create_initialization_options())


def main() -> None:
    """Console entry point."""
    settings = Settings.from_env()
    configure_logging(settings.log_level)
    logger.info("AI Picture MCP Server running on stdio")
    try:
        asyncio.run(run())
    except KeyboardInterrupt:
        logger.info("Shutting down")


if __name__ == "__main__":
    main()
