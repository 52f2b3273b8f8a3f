"""HTTP client for the Sharebox server."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from sharebox.config import settings
from sharebox.errors import (
    AlreadyShared,
    InvalidRequest,
    InvalidTarget,
    NotFound,
    PermissionDenied,
    ShareboxError,
)
from sharebox.schemas.auth import UserInfo
from sharebox.schemas.files import (
    FileOut,
    FolderOut,
    record_adapter,
    record_list_adapter,
)
from sharebox.schemas.tree import DirectoryTreeNode

logger = logging.getLogger(__name__)

_ERROR_BY_NAME: dict[str, type[ShareboxError]] = {
    cls.__name__: cls
    for cls in (AlreadyShared, InvalidRequest, InvalidTarget, NotFound, PermissionDenied)
}

_ERROR_BY_STATUS: dict[int, type[ShareboxError]] = {
    400: InvalidRequest,
    401: PermissionDenied,
    403: PermissionDenied,
    404: NotFound,
    409: AlreadyShared,
}


def _raise_for_status(resp: httpx.Response) -> None:
    if resp.is_success:
        return
    detail = resp.text
    try:
        detail = resp.json().get("detail", detail)
    except Exception:
        pass
    error_type = _ERROR_BY_NAME.get(resp.headers.get("X-Sharebox-Error", "")) or _ERROR_BY_STATUS.get(
        resp.status_code, ShareboxError
    )
    raise error_type(detail)


class ShareboxClient:
    """Async API client; owns its ``httpx.AsyncClient`` unless one is passed in."""

    def __init__(
        self,
        base_url: str | None = None,
        http: httpx.AsyncClient | None = None,
        api_prefix: str | None = None,
    ):
        self._owns_http = http is None
        self._http = http or httpx.AsyncClient(
            base_url=base_url or settings.server_url,
            timeout=settings.request_timeout_seconds,
        )
        self._prefix = api_prefix if api_prefix is not None else settings.api_prefix
        self._token: str | None = None
        self.user: UserInfo | None = None

    async def aclose(self) -> None:
        if self._owns_http:
            await self._http.aclose()

    async def __aenter__(self) -> "ShareboxClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        headers = kwargs.pop("headers", {})
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        resp = await self._http.request(method, f"{self._prefix}{path}", headers=headers, **kwargs)
        _raise_for_status(resp)
        return resp.json()

    # Auth

    async def signup(self, email: str, password: str) -> UserInfo:
        data = await self._request("POST", "/auth/signup", json={"email": email, "password": password})
        return UserInfo(**data)

    async def login(self, email: str, password: str) -> UserInfo:
        data = await self._request("POST", "/auth/login", json={"email": email, "password": password})
        self._token = data["access_token"]
        self.user = await self.me()
        logger.info("Logged in as %s", self.user.email)
        return self.user

    def logout(self) -> None:
        self._token = None
        self.user = None

    async def me(self) -> UserInfo:
        return UserInfo(**await self._request("GET", "/auth/me"))

    async def find_user(self, email: str) -> UserInfo:
        return UserInfo(**await self._request("GET", f"/users/email/{email}"))

    # Records

    async def get_file(self, file_id: str) -> FileOut | FolderOut:
        return record_adapter.validate_python(await self._request("GET", f"/files/{file_id}"))

    async def list_files(self) -> list[FileOut | FolderOut]:
        return record_list_adapter.validate_python(await self._request("GET", "/files"))

    async def list_shared(self) -> list[FileOut | FolderOut]:
        return record_list_adapter.validate_python(await self._request("GET", "/files/shared"))

    async def create_file(
        self,
        name: str,
        size: int = 0,
        mime_type: str | None = None,
        url: str | None = None,
    ) -> FileOut:
        data = await self._request(
            "POST", "/files",
            json={"name": name, "size": size, "mime_type": mime_type, "url": url},
        )
        return FileOut(**data)

    async def create_folder(
        self,
        name: str,
        structure: DirectoryTreeNode | None,
        folder_id: str | None = None,
    ) -> FolderOut:
        payload = {
            "id": folder_id,
            "name": name,
            "structure": structure.model_dump(mode="json") if structure else None,
        }
        return FolderOut(**await self._request("POST", "/folders", json=payload))

    async def update_structure(self, folder_id: str, structure: DirectoryTreeNode) -> FolderOut:
        data = await self._request(
            "PUT", f"/folders/{folder_id}/structure",
            json={"structure": structure.model_dump(mode="json")},
        )
        return FolderOut(**data)

    async def rename(self, file_id: str, name: str) -> FileOut | FolderOut:
        data = await self._request("PUT", f"/files/{file_id}", json={"name": name})
        return record_adapter.validate_python(data)

    async def delete_file(self, file_id: str) -> None:
        await self._request("DELETE", f"/files/{file_id}")

    async def mark_connected(self, folder_id: str, user_id: str) -> FolderOut:
        data = await self._request("POST", f"/files/{folder_id}/connect", json={"user_id": user_id})
        return FolderOut(**data)

    async def share(self, file_id: str, email: str) -> FileOut | FolderOut:
        data = await self._request("POST", f"/files/{file_id}/share", json={"email": email})
        return record_adapter.validate_python(data)

    async def toggle_download(self, file_id: str) -> bool:
        data = await self._request("POST", f"/files/{file_id}/toggle-download")
        return data["allow_download"]
