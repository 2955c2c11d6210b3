# vgosti/client.py
"""
Typed client for the public HTTP API.

    client = ApiClient("http://localhost:3001")
    client.login("admin", "admin123")
    client.create_cabin({...})

Any httpx.Client can be passed in (FastAPI's TestClient included), in which
case base_url is taken from it.
"""

import logging
import mimetypes
import os
from typing import Any, BinaryIO, Dict, List, Optional, Union

import httpx

from vgosti import schemas

logger = logging.getLogger(__name__)

CabinPayload = Union[schemas.CabinCreate, Dict[str, Any]]


class ApiError(Exception):
    def __init__(self, status_code: int, message: str):
        super().__init__(f"API Error: {status_code} {message}")
        self.status_code = status_code
        self.message = message


class ApiClient:
    def __init__(self, base_url: str = "", http: Optional[httpx.Client] = None, timeout: float = 15.0):
        self.http = http or httpx.Client(base_url=base_url, timeout=timeout)
        self.token: Optional[str] = None

    def close(self) -> None:
        self.http.close()

    def __enter__(self) -> "ApiClient":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    # ------------------------------------------------------------------
    def _headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"} if self.token else {}

    def _request(self, method: str, endpoint: str, **kwargs) -> httpx.Response:
        response = self.http.request(method, f"/api{endpoint}", headers=self._headers(), **kwargs)
        if response.is_error:
            raise ApiError(response.status_code, _error_message(response))
        return response

    @staticmethod
    def _cabin_body(cabin: CabinPayload) -> Dict[str, Any]:
        if isinstance(cabin, schemas.CabinCreate):
            return cabin.model_dump(by_alias=True)
        return schemas.CabinCreate.model_validate(cabin).model_dump(by_alias=True)

    # Cabins
    def get_cabins(self, featured: Optional[bool] = None) -> List[schemas.CabinOut]:
        params = {"featured": str(featured).lower()} if featured is not None else None
        data = self._request("GET", "/cabins", params=params).json()
        return [schemas.CabinOut.model_validate(item) for item in data]

    def get_cabin(self, cabin_id: str) -> schemas.CabinOut:
        return schemas.CabinOut.model_validate(self._request("GET", f"/cabins/{cabin_id}").json())

    def create_cabin(self, cabin: CabinPayload) -> schemas.CabinOut:
        data = self._request("POST", "/cabins", json=self._cabin_body(cabin)).json()
        return schemas.CabinOut.model_validate(data)

    def update_cabin(self, cabin_id: str, cabin: CabinPayload) -> schemas.CabinOut:
        data = self._request("PUT", f"/cabins/{cabin_id}", json=self._cabin_body(cabin)).json()
        return schemas.CabinOut.model_validate(data)

    def delete_cabin(self, cabin_id: str) -> None:
        self._request("DELETE", f"/cabins/{cabin_id}")

    # Admin
    def login(self, username: str, password: str) -> Dict[str, Any]:
        """{success, message}; a rejected login is returned, not raised."""
        response = self.http.post("/api/admin/login", json={"username": username, "password": password})
        if response.status_code == 401:
            return response.json()
        if response.is_error:
            raise ApiError(response.status_code, _error_message(response))
        body = response.json()
        self.token = body.get("access_token")
        return body

    def logout(self) -> None:
        self.token = None

    def update_credentials(self, username: str, password: str) -> Dict[str, Any]:
        return self._request("PUT", "/admin/credentials", json={"username": username, "password": password}).json()

    def get_admin_path(self) -> str:
        return self._request("GET", "/admin/path").json()["path"]

    def update_admin_path(self, path: str) -> Dict[str, Any]:
        return self._request("PUT", "/admin/path", json={"path": path}).json()

    # Settings
    def get_settings(self) -> Dict[str, Any]:
        return self._request("GET", "/settings").json()

    def update_settings(self, values: Dict[str, Any]) -> Dict[str, Any]:
        return self._request("PUT", "/settings", json=values).json()

    # Uploads
    def upload_image(self, file: Union[str, BinaryIO], filename: Optional[str] = None,
                     content_type: Optional[str] = None) -> str:
        if isinstance(file, str):
            filename = filename or os.path.basename(file)
            with open(file, "rb") as f:
                content = f.read()
        else:
            filename = filename or os.path.basename(getattr(file, "name", "upload"))
            content = file.read()
        content_type = content_type or mimetypes.guess_type(filename)[0] or "application/octet-stream"
        response = self._request("POST", "/upload", files={"image": (filename, content, content_type)})
        return response.json()["imageUrl"]

    def upload_images(self, files: List[Union[str, BinaryIO]]) -> List[str]:
        return [self.upload_image(f) for f in files]

    # Reviews
    def get_reviews(self) -> List[schemas.ReviewOut]:
        return [schemas.ReviewOut.model_validate(item) for item in self._request("GET", "/reviews").json()]

    def create_review(self, name: str, email: str, rating: int, comment: str) -> schemas.ReviewOut:
        payload = {"name": name, "email": email, "rating": rating, "comment": comment}
        return schemas.ReviewOut.model_validate(self._request("POST", "/reviews", json=payload).json())


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.reason_phrase
    if isinstance(body, dict):
        detail = body.get("detail") or body.get("message") or body.get("error")
        if isinstance(detail, str):
            return detail
    return response.reason_phrase
