"""Project endpoints."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from .models import CreateProjectRequest, ProjectListOptions, ProjectResponse, ProjectsResponse, UpdateProjectRequest

if TYPE_CHECKING:
    from .client import PipeOpsClient


class ProjectService:
    def __init__(self, client: "PipeOpsClient") -> None:
        self._client = client

    async def list(self, options: Optional[ProjectListOptions] = None) -> ProjectsResponse:
        data, _ = await self._client.execute("GET", "project", target=ProjectsResponse, params=options)
        return data or ProjectsResponse()

    async def get(self, project_uuid: str) -> ProjectResponse:
        data, _ = await self._client.execute("GET", f"project/{project_uuid}", target=ProjectResponse)
        return data or ProjectResponse()

    async def create(self, request: CreateProjectRequest) -> ProjectResponse:
        data, _ = await self._client.execute("POST", "project", request, ProjectResponse)
        return data or ProjectResponse()

    async def update(self, project_uuid: str, request: UpdateProjectRequest) -> ProjectResponse:
        data, _ = await self._client.execute("PUT", f"project/{project_uuid}", request, ProjectResponse)
        return data or ProjectResponse()

    async def delete(self, project_uuid: str) -> None:
        await self._client.execute("DELETE", f"project/{project_uuid}")


__all__ = ["ProjectService"]
