"""Static file serving for the single-page application shell."""

import os
import stat

import anyio
from starlette.datastructures import URL
from starlette.exceptions import HTTPException
from starlette.responses import RedirectResponse, Response
from starlette.staticfiles import StaticFiles
from starlette.types import Scope


def looks_like_file(path: str) -> bool:
    """True when the last path segment carries an extension, e.g. ``app.js``."""
    return bool(os.path.splitext(os.path.basename(path))[1])


class SpaStaticFiles(StaticFiles):
    """Serves files from the web root and falls back to the SPA document.

    Directory requests get ``default_document``. Any other unmatched request
    whose path does not name a file is answered with ``fallback_file`` so that
    the client-side router can handle deep links.
    """

    def __init__(self, directory: str, default_document: str = "index.html",
                 fallback_file: str = "index.html"):
        super().__init__(directory=directory, check_dir=False)
        self.default_document = default_document
        self.fallback_file = fallback_file.lstrip("/")

    async def check_config(self) -> None:
        # A missing web root is reported at startup, requests just get 404.
        if os.path.isdir(self.directory):
            await super().check_config()

    async def get_response(self, path: str, scope: Scope) -> Response:
        if scope["method"] in ("GET", "HEAD"):
            full_path, stat_result = await self._lookup(path)
            if stat_result and stat.S_ISREG(stat_result.st_mode):
                return self.file_response(full_path, stat_result, scope)
            if stat_result and stat.S_ISDIR(stat_result.st_mode):
                index_path = os.path.join(path, self.default_document)
                full_path, stat_result = await self._lookup(index_path)
                if stat_result and stat.S_ISREG(stat_result.st_mode):
                    if not scope["path"].endswith("/"):
                        url = URL(scope=scope)
                        return RedirectResponse(url=url.replace(path=url.path + "/"))
                    return self.file_response(full_path, stat_result, scope)

        if looks_like_file(path):
            raise HTTPException(status_code=404)
        return await self.fallback_response(scope)

    async def fallback_response(self, scope: Scope) -> Response:
        full_path, stat_result = await self._lookup(self.fallback_file)
        if not (stat_result and stat.S_ISREG(stat_result.st_mode)):
            raise HTTPException(status_code=404)
        return self.file_response(full_path, stat_result, scope)

    async def _lookup(self, path: str):
        try:
            return await anyio.to_thread.run_sync(self.lookup_path, path)
        except OSError:
            return "", None
