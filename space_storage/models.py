# space_storage/models.py
from pydantic import BaseModel, Field, AliasChoices
from typing import Any, Awaitable, Callable, List, Literal, Optional, AsyncIterator

# --- Identity & Auth ---

class UserAuth(BaseModel):
    """Credentials issued by the Textile hub for a user session."""
    key: str = Field(..., description="User group API key")
    sig: str = Field(..., description="Signature of msg made with the API secret")
    msg: str = Field(..., description="Signed message, usually an expiry timestamp")
    token: Optional[str] = Field(None, description="Hub user token, sent as a bearer token")

    class Config:
        frozen = True

class SpaceUser(BaseModel):
    """A user identity plus, once logged in to the hub, its storage credentials."""
    identity_public_key: str
    storage_auth: Optional[UserAuth] = None

    class Config:
        frozen = True

# --- Buckets ---

class BucketRoot(BaseModel):
    key: str = ""
    name: Optional[str] = None
    path: Optional[str] = None

class Bucket(BaseModel):
    """Result of a create-or-get call on the hub."""
    root: Optional[BucketRoot] = None

    @property
    def root_key(self) -> str:
        # A bucket without a root yet is addressed by the empty key
        return self.root.key if self.root and self.root.key else ""

class PathItem(BaseModel):
    """A directory entry. Children, when listed, are in `entries`.

    `entries` is only filled down to the requested listing depth: below it a directory
    has `entries == []` just like an empty one. Omitted `isDir` means a file.
    """
    name: str
    path: str = ""
    cid: Optional[str] = None
    is_dir: bool = Field(False, validation_alias=AliasChoices("is_dir", "isDir"))
    size: int = 0
    entries: List["PathItem"] = Field(default_factory=list, validation_alias=AliasChoices("entries", "items"))

# --- Requests / Responses ---

class CreateFolderRequest(BaseModel):
    bucket: str
    path: str

class ListDirectoryRequest(BaseModel):
    bucket: str
    path: str
    recursive: bool = False

class ListDirectoryResponse(BaseModel):
    items: List[PathItem] = Field(default_factory=list)

class OpenFileRequest(BaseModel):
    bucket: str
    path: str

class OpenFileResponse:
    """Handle on a file being read from a bucket.

    `stream` yields the file content chunk by chunk and can be consumed once.
    `consume_stream()` drains it into a single bytes object instead.
    """

    def __init__(self, stream: AsyncIterator[bytes], consume: Callable[[AsyncIterator[bytes]], Awaitable[bytes]]):
        self.stream = stream
        self._consume = consume

    async def consume_stream(self) -> bytes:
        return await self._consume(self.stream)

class AddItemsFile(BaseModel):
    path: str
    # bytes, str, a binary file-like object or an (async) iterable of bytes
    data: Any

    class Config:
        arbitrary_types_allowed = True

class AddItemsRequest(BaseModel):
    bucket: str
    files: List[AddItemsFile]

class AddItemsStatus(BaseModel):
    """Upload outcome of a single file."""
    path: str
    status: Literal["success", "error"]
    error: Optional[Exception] = None

    class Config:
        arbitrary_types_allowed = True
        frozen = True

class AddItemsResultSummary(BaseModel):
    """Outcome of every file of an add-items call, in request order."""
    bucket: str
    files: List[AddItemsStatus] = Field(default_factory=list)

    @property
    def failed(self) -> List[AddItemsStatus]:
        return [f for f in self.files if f.status == "error"]
