# space_storage/user_storage.py
import asyncio
import logging
from dataclasses import dataclass
from typing import AsyncIterator, Callable, Optional

from space_storage.buckets_client import BucketsClient, HubBucketsClient
from space_storage.config import settings
from space_storage.errors import DirEntryNotFoundError, UnauthenticatedError
from space_storage.events import AddItemsResponse
from space_storage.models import (
    AddItemsRequest,
    AddItemsResultSummary,
    AddItemsStatus,
    CreateFolderRequest,
    ListDirectoryRequest,
    ListDirectoryResponse,
    OpenFileRequest,
    OpenFileResponse,
    SpaceUser,
    UserAuth,
)
from space_storage.path_utils import join_path, sanitize_path
from space_storage.stream_utils import consume_stream

logger = logging.getLogger("SpaceStorage").getChild("UserStorage")

# Depth used for recursive listings, large enough to reach every level
MAX_LIST_DEPTH = 2**53 - 1

# Substring of the hub's error message for a missing path
NOT_FOUND_MESSAGE = "no link named"

KEEP_FILE = ".keep"


@dataclass
class UserStorageConfig:
    textile_hub_address: Optional[str] = None
    # Optional override of how a bucket client is built from the user's auth.
    # Defaults to HubBucketsClient.with_user_auth.
    buckets_init: Optional[Callable[[UserAuth], BucketsClient]] = None


def _is_not_found(error: Exception) -> bool:
    return NOT_FOUND_MESSAGE in str(error)


class UserStorage:
    """
    Performs storage actions on behalf of the given user.

    Example:
        storage = UserStorage(space_user)
        await storage.create_folder(CreateFolderRequest(bucket="personal", path="/cool"))
    """

    def __init__(self, user: SpaceUser, config: Optional[UserStorageConfig] = None):
        self.user = user
        self.config = config or UserStorageConfig()
        if self.config.textile_hub_address is None:
            self.config.textile_hub_address = settings.TEXTILE_HUB_ADDRESS

    async def create_folder(self, request: CreateFolderRequest) -> None:
        """
        Creates an empty folder at the requested path and bucket.

        The folder is materialized by an empty `.keep` file, so it shows up in listings.
        Any error raised by the hub is propagated.
        """
        client = self._get_user_buckets_client()
        try:
            bucket = await client.get_or_create(request.bucket)
            path = join_path(sanitize_path(request.path.lstrip()), KEEP_FILE)

            logger.info(f"Creating folder '{request.path}' in bucket '{request.bucket}'")
            await client.push_path(bucket.root_key, path, b"")
        finally:
            await self._release_client(client)

    async def list_directory(self, request: ListDirectoryRequest) -> ListDirectoryResponse:
        """
        Returns the bucket entries at the requested path.

        With `recursive` set, every folder's `entries` are populated down to the leaves;
        otherwise only the immediate children are returned.
        Raises DirEntryNotFoundError if the path does not exist.
        """
        client = self._get_user_buckets_client()
        try:
            bucket = await client.get_or_create(request.bucket)
            path = sanitize_path(request.path)

            depth = MAX_LIST_DEPTH if request.recursive else 1
            try:
                result = await client.list_path(bucket.root_key, path, depth)
            except Exception as e:
                if _is_not_found(e):
                    raise DirEntryNotFoundError(path, request.bucket) from e
                raise
        finally:
            await self._release_client(client)

        return ListDirectoryResponse(items=result.entries if result else [])

    async def open_file(self, request: OpenFileRequest) -> OpenFileResponse:
        """
        Opens the file at the requested path for reading.

        `response.stream` is an async iterator of byte chunks:

            response = await storage.open_file(OpenFileRequest(bucket="personal", path="/file.txt"))
            async for chunk in response.stream:
                ...

        or the whole content can be read at once with `await response.consume_stream()`.
        The stream can only be consumed once. The hub connection is closed once it is drained.
        """
        client = self._get_user_buckets_client()
        try:
            bucket = await client.get_or_create(request.bucket)
            path = sanitize_path(request.path)

            try:
                file_data = await client.pull_path(bucket.root_key, path)
            except Exception as e:
                if _is_not_found(e):
                    raise DirEntryNotFoundError(path, request.bucket) from e
                raise
        except BaseException:
            await self._release_client(client)
            raise

        return OpenFileResponse(stream=self._release_after(file_data, client), consume=consume_stream)

    async def add_items(self, request: AddItemsRequest) -> AddItemsResponse:
        """
        Uploads files to a bucket.

        Uploads run sequentially in the background; progress is delivered through the
        returned AddItemsResponse:

            response = await storage.add_items(AddItemsRequest(bucket="personal", files=[...]))
            response.on("data", on_uploaded)     # AddItemsStatus, per uploaded file
            response.on("error", on_failed)      # AddItemsStatus with .error, per failed file
            response.once("done", on_summary)    # AddItemsResultSummary, after every file

        Failing files never make this call raise; only auth or bucket resolution errors do.
        """
        client = self._get_user_buckets_client()
        try:
            bucket = await client.get_or_create(request.bucket)
        except BaseException:
            await self._release_client(client)
            raise
        response = AddItemsResponse()

        # Skip a loop cycle before uploading so the caller can subscribe
        # to the response before the first 'data' or 'error' event
        loop = asyncio.get_running_loop()
        loop.call_soon(self._start_upload, request, client, bucket.root_key, response)

        return response

    def _start_upload(self, request: AddItemsRequest, client: BucketsClient, bucket_key: str, response: AddItemsResponse) -> None:
        task = asyncio.ensure_future(self._upload_multiple_files(request, client, bucket_key, response))
        response._task = task

        def _on_complete(t: asyncio.Task) -> None:
            if t.cancelled():
                response._abort(asyncio.CancelledError())
            elif t.exception() is not None:
                logger.error(f"Upload to bucket '{request.bucket}' stopped unexpectedly: {t.exception()}", exc_info=t.exception())
                response._abort(t.exception())
            else:
                response._finish(t.result())

        task.add_done_callback(_on_complete)

    async def _upload_multiple_files(
        self,
        request: AddItemsRequest,
        client: BucketsClient,
        bucket_key: str,
        response: AddItemsResponse,
    ) -> AddItemsResultSummary:
        summary = AddItemsResultSummary(bucket=request.bucket)
        logger.info(f"Uploading {len(request.files)} file(s) to bucket '{request.bucket}'")

        try:
            # Files are pushed one at a time, in order: parallel pushes
            # against the same bucket root can corrupt it.
            for file in request.files:
                path = sanitize_path(file.path)
                try:
                    await client.push_path(bucket_key, path, file.data)
                except Exception as e:
                    logger.warning(f"Upload of '{file.path}' to bucket '{request.bucket}' failed: {e}")
                    status = AddItemsStatus(path=file.path, status="error", error=e)
                    summary.files.append(status)
                    response.emit(AddItemsResponse.ERROR, status)
                    continue

                status = AddItemsStatus(path=file.path, status="success")
                summary.files.append(status)
                response.emit(AddItemsResponse.DATA, status)
        finally:
            await self._release_client(client)

        logger.info(f"Upload to bucket '{request.bucket}' done: {len(summary.failed)}/{len(summary.files)} failed")
        return summary

    async def _release_after(self, stream: AsyncIterator[bytes], client: BucketsClient) -> AsyncIterator[bytes]:
        try:
            async for chunk in stream:
                yield chunk
        finally:
            await self._release_client(client)

    async def _release_client(self, client: BucketsClient) -> None:
        # Clients from a caller-supplied buckets_init belong to the caller
        if self.config.buckets_init is None:
            await client.aclose()

    def _get_user_buckets_client(self) -> BucketsClient:
        return self._init_bucket(self._get_user_auth())

    def _get_user_auth(self) -> UserAuth:
        if self.user.storage_auth is None:
            raise UnauthenticatedError()
        return self.user.storage_auth

    def _init_bucket(self, user_auth: UserAuth) -> BucketsClient:
        if self.config.buckets_init:
            return self.config.buckets_init(user_auth)
        return HubBucketsClient.with_user_auth(user_auth, host=self.config.textile_hub_address)
