import io
import logging
from typing import Optional

from googleapiclient.discovery import Resource
from googleapiclient.errors import HttpError
from googleapiclient.http import MediaIoBaseUpload

from .errors import StorageError
from .storage import StorageBackend

logger = logging.getLogger(__name__)

MIME_TYPE_FOLDER = 'application/vnd.google-apps.folder'


# drive query strings are single-quoted
def _quote(value: str) -> str:
    return value.replace('\\', '\\\\').replace("'", "\\'")


# generic function to list files with pagination support
def list_files(service: Resource, page_size: int = 100, query: Optional[str] = None) -> list[dict]:
    all_files = []
    page_token = None
    # specify the fields we want to retrieve
    fields = "nextPageToken, files(id, name, mimeType, parents)"

    while True:
        request_params = {
            'pageSize': page_size,
            'fields': fields,
            'pageToken': page_token
        }
        if query:
            request_params['q'] = query

        results = service.files().list(**request_params).execute()
        all_files.extend(results.get('files', []))
        # check if there are more pages
        page_token = results.get('nextPageToken')
        if not page_token:
            break
        logger.debug("Fetched %d files so far for %s", len(all_files), query)

    return all_files


class DriveStorage(StorageBackend):
    """Keys are folder chains under ``root_id``: "A levels/H2 Chemistry/x.pdf".

    Drive has no write-if-absent, so uploads here go through the probing
    fallback of the key allocator.
    """

    def __init__(self, service: Resource, root_id: str = 'root'):
        self.service = service
        self.root_id = root_id
        # folder path -> folder id
        self._folders: dict[str, str] = {}

    def _find_child(self, parent_id: str, name: str, folder: bool) -> Optional[dict]:
        kind = '=' if folder else '!='
        query = (
            f"name = '{_quote(name)}' and "
            f"'{parent_id}' in parents and "
            f"mimeType {kind} '{MIME_TYPE_FOLDER}' and "
            "trashed = false"
        )
        matches = list_files(self.service, page_size=10, query=query)
        return matches[0] if matches else None

    def _folder_id(self, parts: list[str], create: bool = False) -> Optional[str]:
        parent_id = self.root_id
        for depth in range(len(parts)):
            path = '/'.join(parts[:depth + 1])
            if path in self._folders:
                parent_id = self._folders[path]
                continue

            found = self._find_child(parent_id, parts[depth], folder=True)
            if found:
                folder_id = found['id']
            elif create:
                folder_metadata = {
                    'name': parts[depth],
                    'mimeType': MIME_TYPE_FOLDER,
                    'parents': [parent_id]
                }
                folder_id = self.service.files().create(body=folder_metadata, fields='id').execute()['id']
                logger.info("Created Drive folder '%s'", path)
            else:
                return None

            self._folders[path] = folder_id
            parent_id = folder_id
        return parent_id

    def _file(self, key: str) -> Optional[dict]:
        *folders, name = key.split('/')
        parent_id = self._folder_id(folders)
        if parent_id is None:
            return None
        return self._find_child(parent_id, name, folder=False)

    def exists(self, key: str) -> bool:
        try:
            return self._file(key) is not None
        except HttpError as e:
            raise StorageError(f"Failed to look up '{key}' in Drive: {e}", key=key) from e

    def put(self, key: str, data: bytes, content_type: str) -> None:
        *folders, name = key.split('/')
        try:
            parent_id = self._folder_id(folders, create=True)
            media = MediaIoBaseUpload(io.BytesIO(data), mimetype=content_type, resumable=False)
            self.service.files().create(
                body={'name': name, 'parents': [parent_id]},
                media_body=media,
                fields='id'
            ).execute()
        except HttpError as e:
            raise StorageError(f"Failed to upload '{key}' to Drive: {e}", key=key) from e
        logger.info("Uploaded '%s' to Drive (%d bytes)", key, len(data))

    def copy(self, src: str, dst: str) -> None:
        *folders, name = dst.split('/')
        try:
            source = self._file(src)
            if source is None:
                raise StorageError(f"No such file in Drive: {src}", key=src)
            parent_id = self._folder_id(folders, create=True)
            self.service.files().copy(
                fileId=source['id'],
                body={'name': name, 'parents': [parent_id]},
                fields='id'
            ).execute()
        except HttpError as e:
            raise StorageError(f"Failed to copy '{src}' -> '{dst}' in Drive: {e}", key=src) from e

    def delete(self, key: str) -> None:
        try:
            found = self._file(key)
            if found is None:
                return
            self.service.files().delete(fileId=found['id']).execute()
        except HttpError as e:
            raise StorageError(f"Failed to delete '{key}' from Drive: {e}", key=key) from e
