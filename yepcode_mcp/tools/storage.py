"""
Storage object tools.

Uploads accept plain text or ``{data, encoding: "base64"}``; downloads always
return base64 so binary files survive the JSON envelope.
"""

from __future__ import annotations

import asyncio
import base64
import binascii
import io
from typing import Any, Literal

from pydantic import Field
from yepcode_run.api.types import CreateStorageObjectInput

from yepcode_mcp.config import GROUP_STORAGE
from yepcode_mcp.context import ToolContext
from yepcode_mcp.schema import ToolArgs, ToolSpec


class Base64Content(ToolArgs):
    data: str = Field(..., description="File content encoded in base64")
    encoding: Literal["base64"] = Field(..., description="Encoding type")


class ListObjectsArgs(ToolArgs):
    prefix: str | None = Field(
        None,
        description=(
            "Prefix to filter objects by. Filter results to include only objects "
            "whose names begin with this prefix"
        ),
    )


class UploadObjectArgs(ToolArgs):
    filename: str = Field(
        ...,
        description=(
            "Filename or path where to upload the object "
            "(e.g., 'file.txt' or 'folder/file.txt')"
        ),
    )
    content: str | Base64Content = Field(
        ...,
        description=(
            "File content. Use plain text for text files, "
            "or base64 object for binary files"
        ),
    )


class DownloadObjectArgs(ToolArgs):
    filename: str = Field(
        ...,
        description=(
            "Filename or path where to download the object "
            "(e.g., 'file.txt' or 'folder/file.txt')"
        ),
    )


class DeleteObjectArgs(ToolArgs):
    filename: str = Field(
        ...,
        description=(
            "Filename or path where to delete the object "
            "(e.g., 'file.txt' or 'folder/file.txt')"
        ),
    )


def decode_content(content: str | Base64Content) -> bytes:
    if isinstance(content, str):
        return content.encode("utf-8")
    try:
        return base64.b64decode(content.data, validate=True)
    except binascii.Error as e:
        raise ValueError(f"Invalid base64 content: {e}") from e


def read_body(body: Any) -> bytes:
    """Collect a download body (bytes, str, file-like, response or chunk iterable)."""
    if isinstance(body, (bytes, bytearray)):
        return bytes(body)
    if isinstance(body, str):
        return body.encode("utf-8")
    if hasattr(body, "read"):
        return body.read()
    if hasattr(body, "content"):
        return body.content
    return b"".join(bytes(chunk) for chunk in body)


async def list_objects(ctx: ToolContext, args: ListObjectsArgs) -> Any:
    return await ctx.api.get_objects(args.payload())


async def upload_object(ctx: ToolContext, args: UploadObjectArgs) -> dict:
    data = decode_content(args.content)
    await ctx.api.create_object(
        CreateStorageObjectInput(name=args.filename, file=io.BytesIO(data))
    )
    return {"result": f"Object {args.filename} uploaded successfully"}


async def download_object(ctx: ToolContext, args: DownloadObjectArgs) -> dict:
    body = await ctx.api.get_object(args.filename)
    data = await asyncio.to_thread(read_body, body)
    return {
        "content": base64.b64encode(data).decode("ascii"),
        "encoding": "base64",
        "filename": args.filename,
        "size": len(data),
    }


async def delete_object(ctx: ToolContext, args: DeleteObjectArgs) -> dict:
    await ctx.api.delete_object(args.filename)
    return {"result": f"Object {args.filename} deleted successfully"}


TOOLS = [
    ToolSpec(
        name="list_objects",
        title="List storage objects",
        description="List all objects in storage",
        group=GROUP_STORAGE,
        args_model=ListObjectsArgs,
        handler=list_objects,
    ),
    ToolSpec(
        name="upload_object",
        title="Upload storage object",
        description="Upload an object to storage",
        group=GROUP_STORAGE,
        args_model=UploadObjectArgs,
        handler=upload_object,
    ),
    ToolSpec(
        name="download_object",
        title="Download storage object",
        description="Download an object from storage",
        group=GROUP_STORAGE,
        args_model=DownloadObjectArgs,
        handler=download_object,
    ),
    ToolSpec(
        name="delete_object",
        title="Delete storage object",
        description="Delete an object from storage",
        group=GROUP_STORAGE,
        args_model=DeleteObjectArgs,
        handler=delete_object,
    ),
]
