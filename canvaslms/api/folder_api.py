from typing import Any

from canvaslms.api.base_api import BaseApi
from canvaslms.models.file import File
from canvaslms.models.folder import Folder
from canvaslms.utils.streams import ErrorPolicy, TypedStream
from canvaslms.utils.validation import validate_id


class FolderApi(BaseApi):

    async def get_folder(self, folder_id: int) -> Folder:
        """
        Gets a folder by id.
        https://canvas.instructure.com/doc/api/files.html#method.folders.show
        """
        validate_id(folder_id, 'folder_id')
        json_response = await self._client.get(f'folders/{folder_id}')
        return Folder(**json_response)

    async def get_file(self, file_id: int, query: Any = None) -> File:
        """
        Gets a file by id.
        https://canvas.instructure.com/doc/api/files.html#method.files.api_show
        """
        validate_id(file_id, 'file_id')
        json_response = await self._client.get(f'files/{file_id}', query=query)
        return File(**json_response)

    async def get_parent(self, folder: Folder) -> Folder | None:
        """
        Gets the folder containing `folder`.

        :param folder: Folder whose parent to fetch
        :return: The parent folder, or None for a root folder
        """
        if folder.is_root:
            return None
        return await self.get_folder(folder.parent_folder_id)

    def files(self, folder_id: int, query: Any = None, on_error: ErrorPolicy | None = None) -> TypedStream[File]:
        """
        Streams the files directly inside a folder.
        https://canvas.instructure.com/doc/api/files.html#method.files.api_index
        """
        validate_id(folder_id, 'folder_id')
        return self._stream(f'folders/{folder_id}/files', File, query, on_error)

    def folders(self, folder_id: int, query: Any = None, on_error: ErrorPolicy | None = None) -> TypedStream[Folder]:
        """
        Streams the sub-folders of a folder.
        https://canvas.instructure.com/doc/api/files.html#method.folders.api_index
        """
        validate_id(folder_id, 'folder_id')
        return self._stream(f'folders/{folder_id}/folders', Folder, query, on_error)

    async def list_files(self, folder_id: int, query: Any = None) -> list[File]:
        validate_id(folder_id, 'folder_id')
        return await self._paginate(f'folders/{folder_id}/files', File, query).collect()

    async def list_folders(self, folder_id: int, query: Any = None) -> list[Folder]:
        validate_id(folder_id, 'folder_id')
        return await self._paginate(f'folders/{folder_id}/folders', Folder, query).collect()
