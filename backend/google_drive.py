from typing import Optional

from googleapiclient.discovery import build

from core.logger import logger

FOLDER_MIME_TYPE = 'application/vnd.google-apps.folder'


def _quote(value: str) -> str:
    """Escape a string literal for a Drive search query."""
    return "'" + value.replace('\\', '\\\\').replace("'", "\\'") + "'"


class GoogleDriveClient:
    def __init__(self, credentials=None, service=None):
        if service is None:
            if credentials is None:
                raise ValueError("Either credentials or a Drive service is required")
            service = build('drive', 'v3', credentials=credentials, cache_discovery=False)
        self.service = service

    def get_parent_folder(self, file_id: str) -> Optional[str]:
        """Id of the first parent folder of a file, or None if it has no parent."""
        metadata = self.service.files().get(
            fileId=file_id,
            fields='parents',
            supportsAllDrives=True,
        ).execute()
        parents = metadata.get('parents') or []
        return parents[0] if parents else None

    def find_folder(self, name: str, parent_id: str) -> Optional[str]:
        query = (
            f"name = {_quote(name)} and {_quote(parent_id)} in parents"
            f" and mimeType = '{FOLDER_MIME_TYPE}' and trashed = false"
        )
        result = self.service.files().list(
            q=query,
            fields='files(id, name)',
            supportsAllDrives=True,
            includeItemsFromAllDrives=True,
        ).execute()
        files = result.get('files', [])
        return files[0]['id'] if files else None

    def create_folder(self, name: str, parent_id: str) -> str:
        folder = self.service.files().create(
            body={
                'name': name,
                'mimeType': FOLDER_MIME_TYPE,
                'parents': [parent_id],
            },
            fields='id',
            supportsAllDrives=True,
        ).execute()
        logger.info(f"Created Drive folder '{name}' ({folder['id']})")
        return folder['id']

    def get_or_create_folder(self, name: str, parent_id: str) -> str:
        """Reuse the folder with this name under parent_id, creating it on first use."""
        folder_id = self.find_folder(name, parent_id)
        if folder_id:
            return folder_id
        return self.create_folder(name, parent_id)

    def move_file(self, file_id: str, folder_id: str) -> None:
        """Make folder_id the only parent of a file."""
        current_parent = self.get_parent_folder(file_id)
        request_args = {
            'fileId': file_id,
            'addParents': folder_id,
            'fields': 'id, parents',
            'supportsAllDrives': True,
        }
        if current_parent:
            request_args['removeParents'] = current_parent
        self.service.files().update(**request_args).execute()
        logger.debug(f"Moved file {file_id} to folder {folder_id}")
